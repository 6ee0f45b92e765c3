"""Example: resolve course period times through the service layer (no Flask).

Requires a database prepared with scripts/init_db.py and scripts/seed_db.py.
"""

from config import load_settings

from src.course_periods.course_periods.container import build_container


def main():
    container = build_container(db_config=load_settings().DB_CONFIG)
    service = container.course_period_service

    term = container.term_service.get_active_term()
    if term is None:
        print("No active term. Run scripts/seed_db.py first.")
        return

    for location in ("Cơ sở 1", "Cơ sở 2"):
        window = service.get_course_period_time(term.term_id, 1, {"class_location": location})
        print(location, window.to_dict())


if __name__ == "__main__":
    main()
