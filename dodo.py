# -*- coding: utf-8 -*-
# pydoit tast file
# see https://pydoit.org/
# run from this dir with `doit`, or `doit list`, `doit help` etc. (pip install doit 1st)

from doit.action import CmdAction


def _build_pytest_command(
    test_dir,
    keyword="",
    speed="",
    retry=False,
    print_logs=False,
    full_trace=False,
    show_time=False,
):
    """Helper function to build pytest commands for test tasks."""
    cmd = ["pytest"]

    # Add options
    if print_logs:
        cmd.append("--capture=no")
    if full_trace:
        cmd.append("--full-trace")
    if show_time:
        cmd.append("--durations=0")

    # Add common flags
    cmd.extend(["--color=yes", "-vv", "-x"])

    # Add filters
    if retry:
        cmd.append("--lf")
    if keyword:
        cmd.extend(["-k", keyword])
    if speed:
        if speed == "slow":
            cmd.extend(["-m", "slow"])
        elif speed in ["not slow", "fast"]:
            cmd.extend(["-m", '"not slow"'])
        elif speed == "all":
            pass
        elif speed:
            raise ValueError(
                f"Invalid speed filter: {speed}. Use 'slow', 'not slow', 'fast', or 'all'"
            )

    # Add test directory
    cmd.append(test_dir)

    return " ".join(cmd)


_TEST_HELP = """echo '
{title}
{underline}

Filter Options:
  -k, --keyword TEXT    Only run test matching the keyword expression
                        Example: -k "solver and not slow"
  -s, --speed TEXT      Filter test by speed:
                        - "slow": Run only slow test
                        - "not slow" or "fast": Skip slow test
                        - "all": Run all test regardless of speed
  -r, --retry           Only run previously failed test

Output Options:
  -p, --print-logs      Print test logs to console instead of capturing
  -f, --full-trace      Show full traceback on errors
  -t, --show-time       Display duration of all test

Examples:
  doit {task}                     # Run all test
  doit {task} -k fitting          # Run test containing "fitting"
  doit {task} -s fast -p          # Run fast test with logs
  doit {task} --retry --show-time # Rerun failed test with timing
{extra}'"""

_TEST_PARAMS = [
    {
        "name": "help",
        "long": "help",
        "default": False,
        "type": bool,
    },
    {
        "name": "keyword",
        "short": "k",
        "default": "",
    },
    {
        "name": "speed",
        "short": "s",
        "default": "",
    },
    {
        "name": "retry",
        "short": "r",
        "default": False,
        "type": bool,
    },
    {
        "name": "print_logs",
        "short": "p",
        "default": False,
        "type": bool,
    },
    {
        "name": "full_trace",
        "short": "f",
        "default": False,
        "type": bool,
    },
    {
        "name": "show_time",
        "short": "t",
        "default": False,
        "type": bool,
    },
]


def _test_task(test_dir, task, title, extra=""):
    def router(keyword, speed, retry, print_logs, full_trace, show_time, help=False):
        if help:
            return _TEST_HELP.format(
                title=title, underline="=" * len(title), task=task, extra=extra
            )
        try:
            return _build_pytest_command(
                test_dir,
                keyword=keyword,
                speed=speed,
                retry=retry,
                print_logs=print_logs,
                full_trace=full_trace,
                show_time=show_time,
            )
        except ValueError as e:
            return f"echo 'Error: {str(e)}' && exit 1"

    return {
        "actions": [CmdAction(router)],
        "params": _TEST_PARAMS,
        "verbosity": 2,
    }


def task_make_env():
    """Create a conda environment"""
    return {
        "actions": ["conda create --prefix ./conda_env python=3.11"],
        "targets": ["./conda_env"],
        "uptodate": [True],  # Only run if target doesn't exist
        "verbosity": 2,
    }


def task_install():
    """Install heinzclient in editable mode"""
    return {
        "actions": ["pip install -e .[dev]"],
        "task_dep": ["make_env"],
        "verbosity": 2,
    }


def task_test_logic():
    """Run the logic test suite (test in test/logic/), against mock backends."""
    return _test_task("test/logic/", "test_logic", "Test Logic Runner Help")


def task_test_backend():
    """Run the backend test suite (test in test/backend/), against real backends."""
    extra = """
Backends are found via BUM_HOST/BUM_PORT and HEINZ_HOST/HEINZ_PORT
(default 127.0.0.1:9000 and 127.0.0.1:9001). Test are skipped if a
backend is not reachable.
"""
    return _test_task("test/backend/", "test_backend", "Test Backend Runner Help", extra)


def task_format():
    """Format code using ruff."""

    def router(help=False):
        if help:
            return """echo '
Code Formatter Help
=================

This task runs the ruff formatter to ensure consistent code style:
- Sorts imports (ruff check --select I --fix)
- Formats code (ruff format)

Formats these locations:
- src/heinzclient/
- test/
- examples/
- dodo.py

No options required - simply run:
  doit format
  '"""
        return [
            "ruff check --select I --fix src/heinzclient",
            "ruff format src/heinzclient",
            "ruff check --select I --fix test/",
            "ruff format test/",
            "ruff check --select I --fix examples/",
            "ruff format examples/",
            "ruff check --select I --fix dodo.py",
            "ruff format dodo.py",
        ]

    return {
        "actions": [CmdAction(router)],
        "params": [
            {
                "name": "help",
                "long": "help",
                "default": False,
                "type": bool,
            },
        ],
        "verbosity": 2,
    }


def task_docs():
    """Generate documentation using pdoc3."""

    def router(help=False):
        if help:
            return """echo '
Documentation Generator Help
==========================

This task runs pdoc3 to generate HTML documentation for the heinzclient package:
- Outputs to docs/ directory
- Forces regeneration of all files
- Skips errors during generation

No options required - simply run:
  doit docs
  '"""
        return "pdoc3 --output-dir docs/ --html --force --skip-errors ./src/heinzclient/"

    return {
        "actions": [CmdAction(router)],
        "params": [
            {
                "name": "help",
                "long": "help",
                "default": False,
                "type": bool,
            },
        ],
        "verbosity": 2,
    }
