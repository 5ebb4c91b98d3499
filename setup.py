from setuptools import setup, find_packages

setup(
    name="gt-audit",
    version="0.1.0",
    description="Ground truth audit for object detection datasets",
    author="GT Audit Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "tqdm>=4.65.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "model": [
            "ultralytics>=8.0.0",
        ],
        "dev": [
            "pytest>=7.4.0",
            "hypothesis>=6.82.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "gt-audit=gt_audit.cli:main",
        ],
    },
)
