"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the reconcile/save/aggregate logic lives in services.
"""

import importlib
import sys

from config import get_settings_module

from src.class_attendance.class_attendance.container import build_container
from src.class_attendance.class_attendance.common.datetime_utils import DateRange, today_local


def main(class_id: str, actor_id: str) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    today = today_local()

    view = container.view_builder.build_view(class_id, today)
    view = container.recorder.mark_all_present(view)
    container.recorder.save(class_id, today, view, actor_id)

    print(container.aggregation.class_day_summary(class_id, today))
    for row in container.aggregation.class_range_summary_per_student(class_id, DateRange.trailing(today, 30)):
        print(row)


if __name__ == "__main__":
    main(sys.argv[1], sys.argv[2])
