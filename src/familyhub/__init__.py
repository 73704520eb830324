"""
familyhub - Family photo, event and member-profile web application with Streamlit

A web application for sharing a family's history with features including:
- Member profiles with avatars, fun facts and personal memories
- Photo gallery with search, category filters and a lightbox viewer
- Upcoming and past family events
- Photo storage in Google Cloud Storage
- Record storage with DuckDB
- Cloud IAP authentication
"""

__version__ = "0.1.0"
__author__ = "familyhub"
__description__ = "Family photo, event and member-profile web application with Streamlit"
