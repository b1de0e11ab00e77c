from typing import List, Optional

# Statements use named :placeholders bound by planhaus.helpers.execute_sql.
# Only ANSI SQL plus ON CONFLICT / RETURNING, which SQLite (3.35+) and
# PostgreSQL both accept.

# Columns a caller may touch through the dynamic update helpers.
UPDATABLE_COLUMNS = {
    "projects": {"name", "wedding_date", "city", "country", "venue", "guest_count", "budget",
                 "style", "description", "style_tags"},
    "tasks": {"title", "description", "category", "priority", "status", "due_date",
              "assigned_to", "completed_at"},
    "budget_items": {"category", "item", "percent", "hard_cap", "estimated_cost", "actual_cost",
                     "vendor_id", "is_paid", "notes"},
    "guests": {"name", "email", "phone", "rsvp_status", "meal_preference", "plus_one",
               "group_name", "notes"},
    "vendors": {"name", "category", "email", "phone", "website", "quote", "status",
                "contract_signed", "notes"},
    "seating_tables": {"name", "max_seats", "shape", "position_x", "position_y"},
}

ID_COLUMNS = {
    "projects": "project_id",
    "tasks": "task_id",
    "budget_items": "item_id",
    "guests": "guest_id",
    "vendors": "vendor_id",
    "seating_tables": "table_id",
}


# --- Generic helpers ---

def update_fields_query(table: str, update_keys: List[str], scoped_to_project: bool = True) -> str:
    """
    Returns a parameterized UPDATE for the given columns of one row.
    Column names are checked against UPDATABLE_COLUMNS because identifiers
    cannot be bound as parameters.
    """
    allowed = UPDATABLE_COLUMNS.get(table)
    if allowed is None:
        raise ValueError(f"Table '{table}' does not support field updates.")
    unknown = set(update_keys) - allowed
    if unknown:
        raise ValueError(f"Columns not updatable on {table}: {sorted(unknown)}")
    id_column = ID_COLUMNS[table]
    set_clauses = [f"{key} = :{key}" for key in update_keys]
    if table == "projects":
        set_clauses.append("updated_at = CURRENT_TIMESTAMP")
    where = f"{id_column} = :{id_column}"
    if scoped_to_project and table != "projects":
        where += " AND project_id = :project_id"
    return f"""
        UPDATE {table}
        SET {", ".join(set_clauses)}
        WHERE {where}
        RETURNING *;
    """


def delete_by_id_query(table: str) -> str:
    """Returns a project-scoped DELETE that reports the deleted id."""
    id_column = ID_COLUMNS[table]
    return f"""
        DELETE FROM {table}
        WHERE {id_column} = :{id_column} AND project_id = :project_id
        RETURNING {id_column};
    """


def get_by_id_query(table: str) -> str:
    id_column = ID_COLUMNS[table]
    return f"SELECT * FROM {table} WHERE {id_column} = :{id_column} AND project_id = :project_id;"


def list_by_project_query(table: str, order_by: str) -> str:
    return f"SELECT * FROM {table} WHERE project_id = :project_id ORDER BY {order_by};"


# --- Projects ---

def create_project_query() -> str:
    return """
        INSERT INTO projects (project_id, name, wedding_date, city, country, venue, guest_count,
                              budget, style, description, style_tags, created_by)
        VALUES (:project_id, :name, :wedding_date, :city, :country, :venue, :guest_count,
                :budget, :style, :description, :style_tags, :created_by)
        RETURNING *;
    """


def get_project_query() -> str:
    return "SELECT * FROM projects WHERE project_id = :project_id;"


def list_projects_for_user_query() -> str:
    return """
        SELECT p.*, m.role
        FROM projects p
        JOIN project_members m ON m.project_id = p.project_id
        WHERE m.user_id = :user_id
        ORDER BY p.created_at, p.name;
    """


def add_project_member_query() -> str:
    return """
        INSERT INTO project_members (project_id, user_id, role)
        VALUES (:project_id, :user_id, :role)
        ON CONFLICT (project_id, user_id) DO UPDATE SET role = excluded.role
        RETURNING *;
    """


def get_project_member_query() -> str:
    return """
        SELECT project_id, user_id, role
        FROM project_members
        WHERE project_id = :project_id AND user_id = :user_id;
    """


def list_project_members_query() -> str:
    return "SELECT * FROM project_members WHERE project_id = :project_id ORDER BY joined_at;"


# --- Intake ---

def get_intake_by_project_query() -> str:
    return """
        SELECT * FROM intake_records
        WHERE user_id = :user_id AND project_id = :project_id
        ORDER BY updated_at DESC
        LIMIT 1;
    """


def get_unlinked_intake_query() -> str:
    return """
        SELECT * FROM intake_records
        WHERE user_id = :user_id AND project_id IS NULL
        ORDER BY updated_at DESC
        LIMIT 1;
    """


def get_latest_intake_for_project_query() -> str:
    """Any member's most recent intake for the project."""
    return """
        SELECT * FROM intake_records
        WHERE project_id = :project_id
        ORDER BY updated_at DESC
        LIMIT 1;
    """


def create_intake_query() -> str:
    return """
        INSERT INTO intake_records (intake_id, user_id, project_id, raw_data, status)
        VALUES (:intake_id, :user_id, :project_id, :raw_data, :status)
        RETURNING *;
    """


def update_intake_query() -> str:
    return """
        UPDATE intake_records
        SET raw_data = :raw_data,
            status = :status,
            updated_at = CURRENT_TIMESTAMP
        WHERE intake_id = :intake_id
        RETURNING *;
    """


def link_intake_project_query() -> str:
    return """
        UPDATE intake_records
        SET project_id = :project_id,
            updated_at = CURRENT_TIMESTAMP
        WHERE intake_id = :intake_id;
    """


# --- Tasks ---

def create_task_query() -> str:
    return """
        INSERT INTO tasks (task_id, project_id, title, description, category, priority, status,
                           due_date, assigned_to, created_by)
        VALUES (:task_id, :project_id, :title, :description, :category, :priority, :status,
                :due_date, :assigned_to, :created_by)
        RETURNING *;
    """


def insert_seed_task_query() -> str:
    """Seed tasks keep any existing task with the same title untouched."""
    return """
        INSERT INTO tasks (task_id, project_id, title, description, category, priority, status,
                           due_date, created_by)
        VALUES (:task_id, :project_id, :title, :description, :category, :priority, :status,
                :due_date, :created_by)
        ON CONFLICT (project_id, title) DO NOTHING;
    """


# --- Budget ---

def create_budget_item_query() -> str:
    return """
        INSERT INTO budget_items (item_id, project_id, category, item, percent, hard_cap,
                                  estimated_cost, actual_cost, vendor_id, is_paid, notes, created_by)
        VALUES (:item_id, :project_id, :category, :item, :percent, :hard_cap,
                :estimated_cost, :actual_cost, :vendor_id, :is_paid, :notes, :created_by)
        RETURNING *;
    """


def upsert_budget_plan_item_query() -> str:
    return """
        INSERT INTO budget_items (item_id, project_id, category, item, percent, hard_cap,
                                  estimated_cost, is_paid, created_by)
        VALUES (:item_id, :project_id, :category, :item, :percent, :hard_cap,
                :estimated_cost, :is_paid, :created_by)
        ON CONFLICT (project_id, category, item) DO UPDATE SET
            percent = excluded.percent,
            hard_cap = excluded.hard_cap,
            estimated_cost = excluded.estimated_cost;
    """


# --- Guests ---

def create_guest_query() -> str:
    return """
        INSERT INTO guests (guest_id, project_id, name, email, phone, rsvp_status, meal_preference,
                            plus_one, group_name, notes, added_by)
        VALUES (:guest_id, :project_id, :name, :email, :phone, :rsvp_status, :meal_preference,
                :plus_one, :group_name, :notes, :added_by)
        RETURNING *;
    """


def get_guest_query() -> str:
    return "SELECT * FROM guests WHERE guest_id = :guest_id;"


# --- Vendors ---

def create_vendor_query() -> str:
    return """
        INSERT INTO vendors (vendor_id, project_id, name, category, email, phone, website, quote,
                             status, contract_signed, notes, added_by)
        VALUES (:vendor_id, :project_id, :name, :category, :email, :phone, :website, :quote,
                :status, :contract_signed, :notes, :added_by)
        RETURNING *;
    """


# --- Preferences ---

def upsert_preference_query() -> str:
    return """
        INSERT INTO project_preferences (preference_id, project_id, kind, data)
        VALUES (:preference_id, :project_id, :kind, :data)
        ON CONFLICT (project_id, kind) DO UPDATE SET
            data = excluded.data,
            updated_at = CURRENT_TIMESTAMP;
    """


def get_preference_query() -> str:
    return """
        SELECT kind, data, updated_at FROM project_preferences
        WHERE project_id = :project_id AND kind = :kind;
    """


# --- Seating ---

def create_seating_table_query() -> str:
    return """
        INSERT INTO seating_tables (table_id, project_id, name, max_seats, shape, position_x,
                                    position_y, created_by)
        VALUES (:table_id, :project_id, :name, :max_seats, :shape, :position_x,
                :position_y, :created_by)
        RETURNING *;
    """


def get_seating_table_query() -> str:
    return "SELECT * FROM seating_tables WHERE table_id = :table_id;"


def count_table_occupants_query() -> str:
    """Guests seated at a table, not counting the guest being placed."""
    return """
        SELECT COUNT(*) AS occupants
        FROM seating_assignments
        WHERE table_id = :table_id AND guest_id <> :guest_id;
    """


def get_highest_seat_query() -> str:
    return "SELECT MAX(seat_number) AS highest_seat FROM seating_assignments WHERE table_id = :table_id;"


def get_seat_holder_query() -> str:
    return """
        SELECT guest_id FROM seating_assignments
        WHERE table_id = :table_id AND seat_number = :seat_number AND guest_id <> :guest_id;
    """


def delete_assignment_by_guest_query() -> str:
    return """
        DELETE FROM seating_assignments
        WHERE guest_id = :guest_id AND project_id = :project_id
        RETURNING assignment_id;
    """


def delete_assignment_query() -> str:
    return """
        DELETE FROM seating_assignments
        WHERE assignment_id = :assignment_id AND project_id = :project_id
        RETURNING assignment_id;
    """


def delete_table_assignments_query() -> str:
    return "DELETE FROM seating_assignments WHERE table_id = :table_id;"


def create_assignment_query() -> str:
    """Inserts only while the table has a free seat; returns no row when it is full."""
    return """
        INSERT INTO seating_assignments (assignment_id, project_id, table_id, guest_id, seat_number)
        SELECT :assignment_id, :project_id, :table_id, :guest_id, :seat_number
        WHERE (SELECT COUNT(*) FROM seating_assignments WHERE table_id = :table_id)
              < (SELECT max_seats FROM seating_tables WHERE table_id = :table_id)
        RETURNING *;
    """


def list_assignments_query() -> str:
    return """
        SELECT a.*, g.name AS guest_name
        FROM seating_assignments a
        JOIN guests g ON g.guest_id = a.guest_id
        WHERE a.project_id = :project_id
        ORDER BY a.table_id, a.seat_number, g.name;
    """


def list_unassigned_guests_query() -> str:
    return """
        SELECT g.* FROM guests g
        LEFT JOIN seating_assignments a ON a.guest_id = g.guest_id
        WHERE g.project_id = :project_id AND a.assignment_id IS NULL
        ORDER BY g.name;
    """


# --- Activities ---

def create_activity_query() -> str:
    return """
        INSERT INTO activities (activity_id, project_id, user_id, action, entity_type, entity_id,
                                entity_name, details)
        VALUES (:activity_id, :project_id, :user_id, :action, :entity_type, :entity_id,
                :entity_name, :details);
    """


def list_activities_query(limit: Optional[int] = None) -> str:
    query = "SELECT * FROM activities WHERE project_id = :project_id ORDER BY created_at DESC"
    if limit:
        query += f" LIMIT {int(limit)}"
    return query + ";"
