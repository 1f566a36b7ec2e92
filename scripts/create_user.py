"""Create a user from the command line, e.g. the first admin of a fresh database.

    python scripts/create_user.py --email admin@company.com --password 'Secret123!' \
        --firstname Ada --surname Admin --department Operations --role admin
"""
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import argparse

from leaveflow.constants.constants import ROLE_IDS, RoleName
from leaveflow.core.database import seed_roles, session_manager
from leaveflow.core.exceptions import LeaveflowError
from leaveflow.services.UserManagementService import UserManagementService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create a Leaveflow user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--firstname", required=True)
    parser.add_argument("--surname", required=True)
    parser.add_argument("--department", required=True)
    parser.add_argument("--role", choices=[role.value for role in RoleName], default=RoleName.employee.value)
    parser.add_argument("--balance", type=int, default=None, help="Annual leave balance in days")
    return parser.parse_args(argv)


def create_user(args) -> int:
    session_manager.init()
    try:
        with session_manager.get_session() as db:
            seed_roles(db)
            user = UserManagementService(db).add_user(
                firstname=args.firstname,
                surname=args.surname,
                email=args.email,
                password=args.password,
                role_id=ROLE_IDS[RoleName(args.role)],
                department=args.department,
                annual_leave_balance=args.balance,
            )
            print(f"Created user {user.user_id} <{user.email}> as {user.role_label}")
        return 0
    except LeaveflowError as e:
        print(f"Could not create user: {e.message}")
        return 1
    finally:
        session_manager.close()


if __name__ == "__main__":
    sys.exit(create_user(parse_args()))
