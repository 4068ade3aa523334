"""
Attendee badge pipeline.

numbering  -> next badge number, serialized through one allocator
renderer   -> HTML template -> PNG
storage    -> object storage upload (badges/<number>.png)
repository -> badge fields on the registrations table
service    -> generate / regenerate / download
"""
