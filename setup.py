# -*- coding: utf-8 -*-
import setuptools
import pathlib
import site
import sys

# odd bug with develop (editable) installs, see: https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

required = [
    "numpy",
    "loguru",
    "mashumaro",
]

extras = {
    "test": [
        "pytest",
    ],
    "dev": [
        "pytest",
        "doit",
        "ruff",
        "pdoc3",
    ],
}

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

# Read version
version = {}
with open(here / "src/heinzclient/_version.py", "r") as f:
    exec(f.read(), version)

if __name__ == "__main__":
    setuptools.setup(
        name="heinzclient",
        version=version["__version__"],
        description="Client for the BUM model fitting and Heinz module detection backends.",
        long_description=long_description,
        long_description_content_type="text/markdown",
        keywords=[
            "Heinz",
            "BUM model",
            "module detection",
            "network biology",
        ],
        classifiers=[
            "License :: OSI Approved :: MIT License",
            "Development Status :: 3 - Alpha",
        ],
        license="MIT",
        package_dir={"": "src"},
        packages=setuptools.find_packages(
            where="src",
            exclude=["*.test", "*.test.*", "test.*", "test", "test_*"],
        ),
        install_requires=required,
        extras_require=extras,
        python_requires=">= 3.10",
        package_data={"": ["*.md"]},
    )
