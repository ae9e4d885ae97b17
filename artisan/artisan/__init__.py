import os

# PyMySQL only when explicitly requested through the environment
if os.environ.get("MYSQL_USE_PYMYSQL") == "1":
    import pymysql
    pymysql.install_as_MySQLdb()

from .celery import app as celery_app

__all__ = ("celery_app",)
