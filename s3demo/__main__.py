# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
import sys

from .demo.runner import main

sys.exit(main())
