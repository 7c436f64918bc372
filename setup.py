from setuptools import setup, find_packages

setup(
    name="catalog-slideshow-generator",
    version="0.1.0",
    description="Generatore di video slideshow per i prodotti del catalogo",
    author="Joly Lingerie",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "moviepy>=2.0.0",
        "imageio-ffmpeg>=0.4.8",
        "pillow>=10.1.0",
        "numpy>=1.24.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "slideshow-generator=slideshow_generator.cli:main",
        ],
    },
)
