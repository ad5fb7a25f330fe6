#!/usr/bin/env python3
"""
Dynamic setup.py for mlx_forge
Detects Apple Silicon and offers the mlx runtime as an extra
"""

import platform
from setuptools import find_packages, setup


def get_dependencies():
    """Get dependencies of the front-end itself (mlx runs in the target interpreter)"""
    return [
        "typer>=0.9.0",
        "rich>=13.0.0",
        "pyyaml>=6.0",
    ]


def get_extras():
    extras = {
        "test": ["pytest>=7.0", "pytest-asyncio>=0.21"],
        "mlx": ["mlx>=0.0.8", "mlx-lm"],
    }
    if platform.system() == "Darwin" and platform.machine() == "arm64":
        print("🍎 Detected Apple Silicon macOS - 'pip install .[mlx]' makes this interpreter a valid target")
    else:
        print(f"ℹ️  Platform: {platform.system()} {platform.machine()}")
        print("   MLX not available for this platform - only remote/other interpreters can run conversions")
    return extras


if __name__ == "__main__":
    setup(
        name="mlx-forge",
        version="1.0.0",
        description="Check, provision and drive mlx-lm model conversions from one place",
        packages=find_packages(include=["mlx_forge", "mlx_forge.*"]),
        python_requires=">=3.8",
        install_requires=get_dependencies(),
        extras_require=get_extras(),
        entry_points={"console_scripts": ["mlxforge=mlx_forge.cli:app"]},
    )
