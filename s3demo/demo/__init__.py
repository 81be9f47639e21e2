# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from .config import DemoConfig
from .runner import main, run_demo

__all__ = ["DemoConfig", "main", "run_demo"]
