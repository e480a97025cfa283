# user_errors/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py      # App-level errors (AppError, UserError, ...)
# │   ├── driver.py    # SQLSTATE / primary message extraction from driver errors
# │   └── mapper.py    # Map database user-errors to translated UserError
