import io
import re

from setuptools import find_packages, setup

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    io.open("cleanplan/version.py", encoding="utf_8_sig").read(),
).group(1)


setup(
    name="cleanplan-python",
    version=__version__,
    description="cleanplan is a Python library for scheduling cleaning tasks across a roster of workers.",
    long_description="""cleanplan is a Python library for scheduling cleaning tasks across a roster of workers.
It places tasks on a daily time grid, resolves overlaps for display, coordinates drag-and-drop
reassignments and generates batches of tasks under single or round-robin distribution policies.""",
    url="https://github.com/cleanplan/cleanplan",
    author="cleanplan developers",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    zip_safe=False,
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pydantic>=2",
        "sortedcontainers",
        "fire",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": ["cleanplan=cleanplan.__main__:main"],
    },
)
