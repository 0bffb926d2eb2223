from setuptools import setup, find_packages

setup(
    name="ystp-relay",
    version="0.1.0",
    packages=find_packages(include=["ystp", "ystp.*"]),
    python_requires=">=3.10",
    install_requires=[
        # web 框架
        "fastapi>=0.115.0",
        "uvicorn>=0.30.0",
        "websockets>=13.0",
        "pydantic>=2.4.2",

        # 存储
        "redis>=5.0.1",

        # 环境配置
        "python-dotenv>=1.0.0",
        "pydantic-settings>=2.0.0",

        # 日志和调试
        "colorlog>=5.0.1",
    ],
    extras_require={
        # 开发和测试相关
        "test": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "pytest-cov>=4.1.0",
            "httpx>=0.24.0",
        ],
        "dev": [
            "black>=23.3.0",
            "isort>=5.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ystp=ystp.cli:main",
            "ystp-server=ystp.scripts.run_server:run",
        ],
    },
)
