# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Utility functions for s3demo.

This module provides the shared logger and the timing and tracing helpers
used by the storage client, the lifecycle coordinator and the demo CLI.
"""

import logging
import time
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'

logger = logging.getLogger('S3Demo')

def configure_logging(level='INFO'):
    """
    Configure logging for command-line use.

    Args:
        level (str or int): Log level name or number. Defaults to 'INFO'.

    Returns:
        logging.Logger: The s3demo logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)
    return logger

def tracing_enabled():
    """Return True when S3DEMO_TRACE_OPS asks for operation traces."""
    return os.environ.get('S3DEMO_TRACE_OPS', '').lower() in ('true', '1', 'yes')

def time_function(func_name, start_time):
    """
    Helper function for timing operations.

    Calculates and logs the elapsed time for a function call.

    Args:
        func_name (str): Name of the function being timed
        start_time (float): Start time from time.time()

    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.info(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed

def trace_op(operation, target, **details):
    """
    Trace a storage operation for debugging purposes.

    Logs the operation when the S3DEMO_TRACE_OPS environment variable is set.

    Args:
        operation (str): The storage operation being performed
        target (str): The bucket or bucket/key being operated on
        **details: Additional details to log
    """
    if tracing_enabled():
        detail_str = ', '.join(f"{k}={v}" for k, v in details.items())
        logger.debug(f"TRACE: {operation} on {target} {detail_str}")
