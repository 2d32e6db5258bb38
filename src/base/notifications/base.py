from dataclasses import dataclass, asdict
from typing import Optional
import time


@dataclass
class DeliveryResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    demo: bool = False

    def to_dict(self):
        return {key: value for key, value in asdict(self).items() if value is not None}


def demo_message_id(prefix="demo"):
    return f"{prefix}-{int(time.time() * 1000)}"
