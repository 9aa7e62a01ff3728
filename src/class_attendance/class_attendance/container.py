from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.model import AttendanceView
from .attendance.mysql_attendance_repository import MySQLAttendanceLedger
from .attendance.reconciliation import AttendanceViewBuilder
from .attendance.recorder import BulkRecorder
from .attendance.repository import AttendanceLedger
from .common.cache import ReadThroughCache
from .core.enums import ViewOrder
from .database.connection import DBConfig, DatabaseConnection
from .reports.aggregation import AggregationEngine
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService


@dataclass(frozen=True)
class Container:
    roster_repo: RosterRepository
    ledger: AttendanceLedger
    view_cache: Optional[ReadThroughCache[AttendanceView]]

    roster_service: RosterService
    view_builder: AttendanceViewBuilder
    recorder: BulkRecorder
    aggregation: AggregationEngine

    conn: Optional[DatabaseConnection] = None


def build_services(
    roster_repo: RosterRepository,
    ledger: AttendanceLedger,
    *,
    view_order: ViewOrder | str = ViewOrder.ENROLLMENT,
    conn: Optional[DatabaseConnection] = None,
    cache_views: bool = False,
) -> Container:
    """Wire services over any roster/ledger implementation.

    The view cache is only invalidated by writes made through this container,
    so enable it only when this process is the sole writer.
    """
    view_cache: Optional[ReadThroughCache[AttendanceView]] = ReadThroughCache() if cache_views else None
    return Container(
        roster_repo=roster_repo,
        ledger=ledger,
        view_cache=view_cache,
        roster_service=RosterService(roster_repo, cache=view_cache),
        view_builder=AttendanceViewBuilder(roster_repo, ledger, order=ViewOrder(view_order), cache=view_cache),
        recorder=BulkRecorder(roster_repo, ledger, cache=view_cache),
        aggregation=AggregationEngine(roster_repo, ledger),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    view_order: ViewOrder | str = ViewOrder.ENROLLMENT,
    cache_views: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        MySQLRosterRepository(conn),
        MySQLAttendanceLedger(conn),
        view_order=view_order,
        conn=conn,
        cache_views=cache_views,
    )
