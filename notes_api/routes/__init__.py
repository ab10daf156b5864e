# Routes package init
"""
Notes API: API Routes Package
================================

Route Inventory:
    - notes.py:   GET    /api/notes              (list notes, page/limit)
                  POST   /api/notes              (create note)
                  GET    /api/notes/{id}         (get single note)
                  PATCH  /api/notes/{id}         (partial update)
                  DELETE /api/notes/{id}         (delete note)
    - health.py:  GET    /api/healthchecker      (liveness)

Routes stay thin: they take the validated request shape, call NoteService
and pick the status code. Note semantics live in the service.
"""
