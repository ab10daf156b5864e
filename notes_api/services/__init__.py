# Services package init
"""
Notes API: Services Layer
============================

What:  Data-access layer sitting between routes (HTTP) and the document store.
How:   Services receive the collection handle at construction and return
       NoteRecord values, lookup results, or raise DataAccessError subclasses.

Service Inventory:
    - NoteService: list / create / get / update / delete over note documents
    - results:     Found / NOT_FOUND lookup variants
"""
