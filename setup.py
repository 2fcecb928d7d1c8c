from setuptools import setup, find_packages

# Read dependencies from requirements.txt
with open("requirements.txt") as f:
    install_requires = [line.strip() for line in f if line.strip() and not line.startswith("#")]

# Read version from version.txt
with open("version.txt") as f:
    version = f.read().strip()

setup(
    name="benchrig",
    version=version,
    packages=["benchrig"] + ["benchrig." + pkg for pkg in find_packages(where="benchrig")],
    package_dir={"benchrig": "benchrig"},
    install_requires=install_requires,
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "benchrig=benchrig.main:main",
        ],
    },
    include_package_data=True,
    description="Build and run third-party workloads for benchmark suites",
    author="Advanced Micro Devices, Inc.",
    author_email="support@amd.com",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Benchmark",
        "Topic :: Software Development :: Testing",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.9",
)
