from setuptools import find_packages, setup

setup(
    name="pdf-catalog",
    version="0.3.0",
    description="依首頁外觀分群相似 PDF 文件的瀏覽工具",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "Pillow>=10.0",
        "ImageHash>=4.3",
        "numpy>=1.24",
        "PyMuPDF>=1.23",
        "Send2Trash>=1.8",
    ],
    extras_require={
        "test": ["pytest>=7.4", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": ["pdf-catalog=pdf_catalog.main:main"],
    },
)
