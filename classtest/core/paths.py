"""
Document paths.

Private, platform-wide documents (accounts, teachers) live under
artifacts/{app}/private/data; the teacher code index under
artifacts/{app}/public/data; everything a tenant owns under
artifacts/{app}/tenants/{tenant_id}/public/data.
"""

from classtest.core.config import settings

CLASS_SETTINGS_DOC = "classActiveSettings"


class StorePaths:
    def __init__(self, app_id: str) -> None:
        self.root = f"artifacts/{app_id}"

    # ----- platform-wide -----
    def accounts(self) -> str:
        return f"{self.root}/private/data/accounts"

    def account(self, email: str) -> str:
        return f"{self.accounts()}/{email.strip().lower()}"

    def teachers(self) -> str:
        return f"{self.root}/private/data/teachers"

    def teacher(self, uid: str) -> str:
        return f"{self.teachers()}/{uid}"

    def teacher_index(self) -> str:
        return f"{self.root}/public/data/teacherIndex"

    def teacher_code(self, code: str) -> str:
        return f"{self.teacher_index()}/{code}"

    # ----- tenant-owned -----
    def tenant(self, tenant_id: str) -> str:
        return f"{self.root}/tenants/{tenant_id}/public/data"

    def students(self, tenant_id: str) -> str:
        return f"{self.tenant(tenant_id)}/students"

    def student(self, tenant_id: str, student_id: str) -> str:
        return f"{self.students(tenant_id)}/{student_id}"

    def sessions(self, tenant_id: str) -> str:
        return f"{self.tenant(tenant_id)}/sessions"

    def session(self, tenant_id: str, session_id: str) -> str:
        return f"{self.sessions(tenant_id)}/{session_id}"

    def settings(self, tenant_id: str) -> str:
        return f"{self.tenant(tenant_id)}/settings"

    def class_settings(self, tenant_id: str) -> str:
        return f"{self.settings(tenant_id)}/{CLASS_SETTINGS_DOC}"


paths = StorePaths(settings.app_id)
