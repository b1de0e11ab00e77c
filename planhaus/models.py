import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, Date, Numeric, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())

# JSON-valued columns are Text holding json.dumps output so the same raw SQL
# runs on SQLite and PostgreSQL.


class Project(Base):
    __tablename__ = 'projects'
    project_id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    wedding_date = Column(Date)
    city = Column(Text)
    country = Column(Text)
    venue = Column(Text)
    guest_count = Column(Integer)
    budget = Column(Numeric(12, 2))
    style = Column(Text)
    description = Column(Text)
    style_tags = Column(Text)
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Project(project_id='{self.project_id}', name='{self.name}')>"


class ProjectMember(Base):
    __tablename__ = 'project_members'
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(String(36), primary_key=True)
    role = Column(String(50), nullable=False, default='edit')
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ProjectMember(project_id='{self.project_id}', user_id='{self.user_id}', role='{self.role}')>"


class IntakeRecord(Base):
    __tablename__ = 'intake_records'
    intake_id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='SET NULL'))
    raw_data = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default='draft')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<IntakeRecord(intake_id='{self.intake_id}', status='{self.status}')>"


class Task(Base):
    __tablename__ = 'tasks'
    task_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    priority = Column(String(10), default='medium')
    status = Column(String(20), nullable=False, default='not_started')
    due_date = Column(Date)
    assigned_to = Column(String(36))
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True))

    __table_args__ = (UniqueConstraint('project_id', 'title'),)

    def __repr__(self):
        return f"<Task(task_id='{self.task_id}', title='{self.title}')>"


class BudgetItem(Base):
    __tablename__ = 'budget_items'
    item_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    category = Column(String(100), nullable=False)
    item = Column(Text, nullable=False)
    percent = Column(Numeric(5, 2))
    hard_cap = Column(Numeric(12, 2))
    estimated_cost = Column(Numeric(12, 2))
    actual_cost = Column(Numeric(12, 2))
    vendor_id = Column(String(36))
    is_paid = Column(Boolean, default=False)
    notes = Column(Text)
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint('project_id', 'category', 'item'),)

    def __repr__(self):
        return f"<BudgetItem(item_id='{self.item_id}', item='{self.item}', estimated_cost='{self.estimated_cost}')>"


class Guest(Base):
    __tablename__ = 'guests'
    guest_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    rsvp_status = Column(String(20), default='pending')
    meal_preference = Column(Text)
    plus_one = Column(Boolean, default=False)
    group_name = Column(String(100))
    notes = Column(Text)
    added_by = Column(String(36), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Guest(guest_id='{self.guest_id}', name='{self.name}')>"


class Vendor(Base):
    __tablename__ = 'vendors'
    vendor_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    website = Column(Text)
    quote = Column(Numeric(12, 2))
    status = Column(String(20), default='pending')
    contract_signed = Column(Boolean, default=False)
    notes = Column(Text)
    added_by = Column(String(36), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Vendor(vendor_id='{self.vendor_id}', name='{self.name}')>"


class ProjectPreference(Base):
    """One JSON document per (project, kind): vendor, site, guest or event."""
    __tablename__ = 'project_preferences'
    preference_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    kind = Column(String(20), nullable=False)
    data = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint('project_id', 'kind'),)


class SeatingTable(Base):
    __tablename__ = 'seating_tables'
    table_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    name = Column(String(100), nullable=False)
    max_seats = Column(Integer, nullable=False, default=8)
    shape = Column(String(20), default='round')
    position_x = Column(Integer, default=0)
    position_y = Column(Integer, default=0)
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<SeatingTable(table_id='{self.table_id}', name='{self.name}', max_seats={self.max_seats})>"


class SeatingAssignment(Base):
    __tablename__ = 'seating_assignments'
    assignment_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    table_id = Column(String(36), ForeignKey('seating_tables.table_id', ondelete='CASCADE'), nullable=False)
    guest_id = Column(String(36), ForeignKey('guests.guest_id', ondelete='CASCADE'), nullable=False, unique=True)
    seat_number = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # NULL seat numbers do not collide
    __table_args__ = (UniqueConstraint('table_id', 'seat_number'),)

    def __repr__(self):
        return f"<SeatingAssignment(guest_id='{self.guest_id}', table_id='{self.table_id}', seat={self.seat_number})>"


class Activity(Base):
    __tablename__ = 'activities'
    activity_id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String(36), nullable=False)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36))
    entity_name = Column(Text)
    details = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
