"""Setup script for the SpeechDesk startup core."""

import os
from setuptools import setup, find_packages

# Read long description from README if available
long_description = ""
readme_path = os.path.join(os.path.dirname(__file__), "README.md")
if os.path.exists(readme_path):
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="speechdesk",
    version="1.0.0",
    description="Startup resilience and readiness coordination for a desktop text-to-speech converter",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="SpeechDesk Development Team",
    url="https://github.com/speechdesk/speechdesk",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-qt>=4.2.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Multimedia :: Sound/Audio :: Speech",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    keywords="tts text-to-speech ffmpeg edge-tts readiness retry",
)
