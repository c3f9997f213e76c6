"""
Utility functions for the reconciliation workflow.

This module contains helpers used by the command-line workflow that are
not part of the matching engine itself.
"""

import os
import pathlib
import logging

logger = logging.getLogger(__name__)

def setup_logging(debug=False, log_level='info'):
    """Configure logging for the application.

    Args:
        debug (bool): Force DEBUG level
        log_level (str): Level name used when debug is off

    Returns:
        str: Path of the log file
    """
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Get log file path from environment or use default
    log_file = os.getenv('LOG_FILE', 'debug.log')

    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ],
        force=True
    )

    return log_file

def ensure_directory(dir_type):
    """Ensure a managed directory exists under DATA_DIR.

    Args:
        dir_type (str): Type of directory ('logs', 'output', 'data')

    Returns:
        pathlib.Path: Path to the directory

    Raises:
        ValueError: If dir_type is invalid
    """
    valid_dir_types = ['logs', 'output', 'data']
    if dir_type not in valid_dir_types:
        raise ValueError(f"Invalid directory type: {dir_type}. Expected one of: {valid_dir_types}")

    base_dir = os.getenv('DATA_DIR', os.getcwd())
    dir_path = pathlib.Path(base_dir) / dir_type
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path

def create_output_directory(output_dir, command):
    """
    Create the output directory for one workflow run.

    Args:
        output_dir (str or pathlib.Path): Base directory for output files
        command (str): Workflow name ('duplicates' or 'process')

    Returns:
        pathlib.Path: Directory the run should write into
    """
    logger.info(f"Creating output directory for {command} in {output_dir}")

    if isinstance(output_dir, str):
        output_dir = pathlib.Path(output_dir)

    run_dir = output_dir / command
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir
