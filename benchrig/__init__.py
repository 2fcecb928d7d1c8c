"""benchrig - build and run third-party workloads for benchmarking."""
