"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/config.py
Centralized processing constants for the catalog pipeline and asset copier.
"""
import os


class ProcessingConfig:
    # Asset copier: records handed to the worker pool per batch (inner progress granularity)
    COPY_BATCH_SIZE = 50
    # ROM copier: records between cooperative cancellation checks
    ROM_CANCEL_INTERVAL = 10
    # Software aggregator: softwares between cancellation checks while flattening a file
    AGGREGATE_BATCH_SIZE = 500

    ROM_EXTENSION = "zip"
    IMAGE_EXTENSIONS = ("png", "jpg", "jpeg")

    RECORD_SET_EXTENSION = ".xml"
    DAT_EXTENSION = ".dat"
    CATALOG_GLOB = "*.xml"

    DEFAULT_LOG_FILE = "ErrorLog.txt"
    LOG_HISTORY_LIMIT = 5000

    NO_DESCRIPTION = "No Description"
    DEFAULT_FILE_NAME = "Untitled"

    @staticmethod
    def get_worker_count() -> int:
        """Worker pool size derived from hardware concurrency, at least 1."""
        return max(1, os.cpu_count() or 1)
