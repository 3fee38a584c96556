from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="annotate_edit",
    version=Path("./annotate_edit/VERSION").read_text().strip(),
    packages=find_packages(include=["annotate_edit", "annotate_edit.*"]),
    package_data={"annotate_edit": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python-headless",
        "easydict",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "annotate_edit = annotate_edit.cli:main",
        ],
    },
)
