from setuptools import setup, find_packages

setup(
    name="sample-app",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.15.0",
        "python-dotenv>=0.19.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "redis>=4.0.0",
        "sqlalchemy>=1.4.0",
        "passlib>=1.7.4",
        "argon2-cffi>=21.0.0",
        "python-jose[cryptography]>=3.3.0",
        "email-validator>=2.0.0",
    ],
    extras_require={
        "mysql": ["mysqlclient>=2.0.3"],
        "test": ["pytest>=7.0", "httpx>=0.24"],
    },
)
