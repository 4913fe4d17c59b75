# -*- coding: utf-8 -*-

DEFAULT_HOST_ADDR = "127.0.0.1"
DEFAULT_FITTING_PORT = 9000
DEFAULT_SOLVER_PORT = 9001
DEFAULT_TIMEOUT = None  # seconds, None blocks until the backend answers
DEFAULT_STARTS = 10  # number of starts for BUM model fitting
DEFAULT_FDR = 0.01
DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"
