"""
Core Package.

    core.models  - ORM records (ErrorAndWarningRecord)
    core.schema  - Message boundary models (ErrorReportMessage)
"""
