"""
state.py - UI state container
"""


class AppState:
    def __init__(self):
        self.route: str = "/"
        self.admin: dict = {}
        self.list_page = None  # views.ListPage of the open resource page
        self.sidebar_counts = None  # stats_service.SidebarCounts
