# -*- coding: utf-8 -*-
"""
Utility functions and constants for heinzclient.

This module provides:

- Default hosts, ports and algorithm parameters
- Logging configuration and management
- Serialisation of p-values, node and edge tables into backend input files

Examples
--------
Logging to stderr while experimenting:
```python
from heinzclient.util import start_client_log
start_client_log(log_to_file=False, log_to_stdout=True, log_level="DEBUG")
```

See Also
--------
heinzclient.util.logging : Logging configuration
heinzclient.util.tables : Input file serialisation
"""

from .defaults import (
    DEFAULT_FDR,
    DEFAULT_FITTING_PORT,
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_SOLVER_PORT,
    DEFAULT_STARTS,
    DEFAULT_TIMEOUT,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    get_log_filename,
    log_default_path_client,
    shutdown_client_log,
    start_client_log,
)
from .tables import (
    format_edge_table,
    format_float_parameter,
    format_int_parameter,
    format_node_table,
    format_pvalue_file,
)

__all__ = [
    "DEFAULT_FDR",
    "DEFAULT_FITTING_PORT",
    "DEFAULT_HOST_ADDR",
    "DEFAULT_LOGLEVEL",
    "DEFAULT_SOLVER_PORT",
    "DEFAULT_STARTS",
    "DEFAULT_TIMEOUT",
    "TEST_LOGLEVEL",
    "clear_log",
    "get_log_filename",
    "log_default_path_client",
    "shutdown_client_log",
    "start_client_log",
    "format_edge_table",
    "format_float_parameter",
    "format_int_parameter",
    "format_node_table",
    "format_pvalue_file",
]
