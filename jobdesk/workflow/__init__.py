from .status import TaskStatus, can_transition, can_request_transition, is_task_terminal
from .deadlines import allocate_deadlines, select_departments, check_stage_deadlines, check_allocation
from .generator import generate_tasks
from .progression import update_task, unblock_next_task, create_task, get_task, tasks_for_job
