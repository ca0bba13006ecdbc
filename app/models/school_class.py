from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base
from app.models.enums import ClassStatus, enum_values

DEFAULT_CAPACITY = 50


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    invite_code = Column(String(20), unique=True, nullable=False)

    subject_id = Column(
        Integer,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    teacher_id = Column(
        String(255),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    description = Column(Text, nullable=True)
    banner_url = Column(Text, nullable=True)
    banner_image_ref = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False, default=DEFAULT_CAPACITY)
    status = Column(
        Enum(ClassStatus, name="class_status", values_callable=enum_values),
        nullable=False,
        default=ClassStatus.ACTIVE,
    )
    # ordered list of {"day", "startTime", "endTime"}
    schedules = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    subject = relationship("Subject", back_populates="classes")
    teacher = relationship("User", back_populates="classes")

    enrollments = relationship(
        "Enrollment",
        back_populates="school_class",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
