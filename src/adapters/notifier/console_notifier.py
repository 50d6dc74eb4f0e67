from ...domain.models import Notice
from ...domain.ports import NotifierPort


class ConsoleNotifier(NotifierPort):
    async def notify(self, notice: Notice) -> None:
        label = "ERROR" if notice.is_error else "INFO"
        print(f"[notice] {label}: {notice.message}")
