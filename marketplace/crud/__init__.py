# marketplace/crud/__init__.py
# Module-level CRUD functions. They add and flush; committing is left to the
# service layer's unit of work.
