"""Budget Tracker package.

A monthly budget and spending tracker. Settings and transactions live either
in local JSON documents or behind the record-store API in ``api_server.py``;
``app.py`` is the Streamlit front end.
"""
