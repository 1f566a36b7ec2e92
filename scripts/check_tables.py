import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from sqlalchemy import inspect

from leaveflow.core.database import session_manager


def list_tables():
    # Initialize the session manager first
    session_manager.init()
    try:
        tables = inspect(session_manager.engine).get_table_names()
        print("Tables in database:", tables)
    finally:
        session_manager.close()


if __name__ == "__main__":
    list_tables()
