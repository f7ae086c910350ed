"""
CVBooster Core Setup Configuration
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README file
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Read requirements
requirements = [
    "fastapi>=0.100.0",
    "uvicorn[standard]>=0.23.0",
    "httpx>=0.24.0",
    "pydantic>=2.3.0",
    "loguru>=0.7.0",
    "asyncpg>=0.28.0",
    "pdfplumber>=0.9.0",
    "tenacity>=8.2.0",
    "PyYAML>=6.0",
    "python-multipart>=0.0.6",
    "python-dotenv>=1.0.0",  # For environment configuration
    "openai>=1.0.0",  # For CV analysis and chat
    "reportlab>=4.0.0",  # For PDF export
    "python-docx>=1.0.0",  # For DOCX export and Word uploads
]

dev_requirements = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.21.0",
    "black>=23.7.0",
    "isort>=5.12.0",
    "flake8>=6.0.0",
    "mypy>=1.5.0",
]

setup(
    name="cvbooster-core",
    version="0.1.0",
    author="CVBooster Team",
    author_email="team@example.com",
    description="简历优化服务核心库: ATS导出、联盟推广追踪与AI分析",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-org/cvbooster-core",
    package_dir={"": "src", "app": "app"},
    packages=find_packages("src") + ["app", "app.v1"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Processing :: General",
        "Topic :: Database",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
        "all": requirements + dev_requirements,
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "cvbooster-server=app.main:main",
        ],
    },
    keywords="resume, cv, ats, export, pdf, docx, affiliate",
)
