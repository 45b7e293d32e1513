from .department import Department
from .role import Role, PERMISSION_MODULES, PERMISSION_ACTIONS
from .employee import Employee, EMPLOYEE_ROLES
from .client import Client
from .job import Job
from .task import Task
