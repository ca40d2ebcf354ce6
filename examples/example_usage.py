"""Example: preview a recurring schedule through the service layer (no Flask).

Controllers are a thin layer; the generation rules live in the services.
"""

import importlib
from datetime import date, time

from config import get_settings_module

from src.tutoring_center.tutoring_center.container import build_container
from src.tutoring_center.tutoring_center.core.enums import SessionType
from src.tutoring_center.tutoring_center.generation.model import GenerationRequest


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    request = GenerationRequest(
        center_id="center-downtown",
        tutor_id="tutor-1",
        session_type=SessionType.ONE_ON_ONE,
        student_id="student-1",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        weekdays=frozenset({1}),
        start_time=time(9, 0),
        end_time=time(10, 0),
        timezone="America/Edmonton",
    )
    print(container.generation_service.preview(request).to_preview_payload())


if __name__ == "__main__":
    main()
