from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from workout_charts.models import QuantityKind, WorkoutRef

Base = declarative_base()


class Workout(Base):
    __tablename__ = "workouts"
    id = Column(Integer, primary_key=True)
    # timezone-aware UTC
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True))
    activity_type = Column(String(32), nullable=False, default="cycling")
    total_distance_m = Column(Float)
    total_energy_kj = Column(Float)

    samples = relationship("QuantitySample", back_populates="workout")


class QuantitySample(Base):
    __tablename__ = "quantity_samples"

    id = Column(Integer, primary_key=True)
    workout_id = Column(Integer, ForeignKey("workouts.id"), nullable=False)
    kind = Column(String(32), nullable=False)
    # offset from workout start
    timestamp_ms = Column(BigInteger, nullable=False)
    # stored in QuantityKind.canonical_unit
    value = Column(Float, nullable=False)

    workout = relationship("Workout", back_populates="samples")

    __table_args__ = (
        Index("ix_sample_workout_kind", "workout_id", "kind"),
        Index("ix_sample_workout_kind_time", "workout_id", "kind", "timestamp_ms"),
    )


def _sqlite_pragmas(dbapi_con, _con_record):
    cur = dbapi_con.cursor()
    cur.execute("PRAGMA journal_mode=WAL;")
    cur.execute("PRAGMA synchronous=NORMAL;")
    cur.execute("PRAGMA foreign_keys=ON;")
    cur.close()


def as_utc(dt: datetime) -> datetime:
    # SQLite hands datetimes back naive
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo("UTC"))


def _to_ref(w: Workout) -> WorkoutRef:
    return WorkoutRef(
        id=int(w.id),
        start=as_utc(w.start_time),
        end=as_utc(w.end_time) if w.end_time else None,
        activity_type=w.activity_type or "cycling",
        distance_m=w.total_distance_m,
        energy_kj=w.total_energy_kj,
    )


class HealthStore:
    BATCH_SIZE = 25

    def __init__(self, database_url: str):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            database_url,
            echo=False,
            future=True,
            connect_args=connect_args,
            pool_pre_ping=True,
        )
        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _sqlite_pragmas)

        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

        # staging area for batching
        self._pending: list[QuantitySample] = []

    def create_workout(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        activity_type: str = "cycling",
        distance_m: float | None = None,
        energy_kj: float | None = None,
    ) -> WorkoutRef:
        with self.Session() as session:
            w = Workout(
                start_time=as_utc(start) if start else datetime.now(tz=ZoneInfo("UTC")),
                end_time=as_utc(end) if end else None,
                activity_type=activity_type,
                total_distance_m=distance_m,
                total_energy_kj=energy_kj,
            )
            session.add(w)
            session.commit()
            return _to_ref(w)

    def finish_workout(
        self,
        workout_id: int,
        end: datetime | None = None,
        distance_m: float | None = None,
        energy_kj: float | None = None,
    ) -> WorkoutRef:
        # flush any leftover samples before closing
        self.flush()

        with self.Session() as session:
            w = session.get(Workout, workout_id)
            if w is None:
                raise LookupError(f"No workout with id {workout_id}")
            w.end_time = as_utc(end) if end else datetime.now(tz=ZoneInfo("UTC"))
            if distance_m is not None:
                w.total_distance_m = distance_m
            if energy_kj is not None:
                w.total_energy_kj = energy_kj
            session.commit()
            return _to_ref(w)

    def insert_sample(
        self, workout_id: int, kind: QuantityKind, timestamp_ms: int, value: float
    ) -> None:
        self._pending.append(
            QuantitySample(
                workout_id=workout_id,
                kind=kind.value,
                timestamp_ms=int(timestamp_ms),
                value=float(value),
            )
        )
        if len(self._pending) >= self.BATCH_SIZE:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        with self.Session() as session:
            session.add_all(self._pending)
            session.commit()
        self._pending.clear()

    def get_workout(self, workout_id: int) -> WorkoutRef:
        with self.Session() as session:
            w = session.get(Workout, workout_id)
            if w is None:
                raise LookupError(f"No workout with id {workout_id}")
            return _to_ref(w)

    def list_workouts(self) -> list[WorkoutRef]:
        with self.Session() as session:
            rows = session.query(Workout).order_by(Workout.start_time.desc()).all()
            return [_to_ref(w) for w in rows]

    def samples(self, workout_id: int, kind: QuantityKind) -> list[tuple[int, float]]:
        """Return ``(timestamp_ms, value)`` pairs for one kind, ordered by time."""
        with self.Session() as session:
            rows = (
                session.query(QuantitySample.timestamp_ms, QuantitySample.value)
                .filter_by(workout_id=workout_id, kind=kind.value)
                .order_by(QuantitySample.timestamp_ms)
                .all()
            )
            return [(int(t), float(v)) for t, v in rows]
