'''
Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved. This notice is intended as a precaution against inadvertent publication and does not imply publication or any waiver of confidentiality.
The year included in the foregoing notice is the year of creation of the work.
All code contained here is Property of Advanced Micro Devices, Inc.
'''

import os
import shutil


def copy_file(dst, src):
    """
    Copy src to dst, keeping the permission bits so copied binaries stay executable.

    The source is left in place.
    """
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)


def rm_dir_contents(path):
    """
    Delete everything inside path but keep path itself.

    Symlinks are removed, never followed.
    """
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.unlink(entry.path)


def ensure_dirs(*paths):
    for path in paths:
        os.makedirs(path, exist_ok=True)
