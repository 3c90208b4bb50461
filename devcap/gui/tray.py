"""System tray surface: renders controller snapshots into the tray menu."""
from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Optional

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtGui import QActionGroup, QDesktopServices, QIcon
from PyQt6.QtWidgets import QApplication, QFileDialog, QMenu, QStyle, QSystemTrayIcon

from devcap.config.defaults import REFRESH_INTERVAL_CHOICES
from devcap.config.settings import Settings
from devcap.core import aggregation
from devcap.core.controller import ControllerSnapshot, RefreshController
from devcap.core.expansion import ExpansionMemory
from devcap.core.models import BadgeMode, Branch, Commit, Period, Project

logger = logging.getLogger(__name__)


class ActivityTray(QObject):
    """Tray icon whose menu is rebuilt from every controller snapshot.

    Projects the user expanded are listed inline with their branches; collapsed
    projects become submenus. Clicking a project header flips it.
    """

    def __init__(self, controller: RefreshController, settings: Settings) -> None:
        super().__init__()
        self._controller = controller
        self._settings = settings
        self._expansion = ExpansionMemory()
        self._snapshot: ControllerSnapshot = controller.snapshot()

        self._tray = QSystemTrayIcon(self._default_icon(), self)
        self._menu = QMenu()
        self._tray.setContextMenu(self._menu)
        self._menu.aboutToShow.connect(self._rebuild_menu)

        controller.subscribe(self._on_snapshot)
        self._render(self._snapshot)

    def show(self) -> None:
        self._tray.show()

    @staticmethod
    def _default_icon() -> QIcon:
        style = QApplication.style()
        fallback = style.standardIcon(QStyle.StandardPixmap.SP_DirIcon) if style else QIcon()
        return QIcon.fromTheme("vcs-normal", fallback)

    def _on_snapshot(self, snapshot: ControllerSnapshot) -> None:
        self._render(snapshot)

    def _render(self, snapshot: ControllerSnapshot) -> None:
        self._snapshot = snapshot
        self._expansion.sync(snapshot.expansion)
        badge = aggregation.format_badge(snapshot.badge_value)
        tooltip = f"devcap · {snapshot.period.label}"
        if badge:
            tooltip += f" · {badge}"
        self._tray.setToolTip(tooltip)
        self._rebuild_menu()

    # ------------------------------------------------------------------
    # Menu construction
    # ------------------------------------------------------------------
    def _rebuild_menu(self) -> None:
        snapshot = self._snapshot
        menu = self._menu
        menu.clear()

        header = menu.addAction(self._header_text(snapshot))
        header.setEnabled(False)
        self._add_period_menu(menu, snapshot.period)
        menu.addSeparator()

        if snapshot.is_loading and not snapshot.projects:
            menu.addAction("Scanning repositories...").setEnabled(False)
        elif not snapshot.projects:
            text = "Scan failed" if snapshot.scan_failed else "No commits found"
            menu.addAction(text).setEnabled(False)
        else:
            for project in snapshot.projects:
                self._add_project(menu, project)

        menu.addSeparator()
        refresh = menu.addAction("Refresh")
        refresh.setEnabled(not snapshot.is_loading)
        refresh.triggered.connect(lambda _checked=False: self._controller.refresh())

        toggle = menu.addAction("Collapse All" if snapshot.expansion.all_expanded else "Expand All")
        toggle.triggered.connect(lambda _checked=False: self._controller.toggle_expansion())

        self._add_settings_menu(menu, snapshot)
        menu.addSeparator()
        menu.addAction("Quit").triggered.connect(lambda _checked=False: QApplication.quit())

    def _header_text(self, snapshot: ControllerSnapshot) -> str:
        if snapshot.is_loading and snapshot.projects:
            return "Refreshing..."
        parts = [f"{snapshot.total_commits} commits"]
        age = aggregation.refresh_age_label(snapshot.last_refresh_at, datetime.now().astimezone())
        if age:
            parts.append(age)
        return " · ".join(parts)

    def _add_period_menu(self, menu: QMenu, current: Period) -> None:
        submenu = menu.addMenu(current.label)
        group = QActionGroup(submenu)
        for period in Period:
            action = submenu.addAction(period.label)
            action.setCheckable(True)
            action.setChecked(period is current)
            action.triggered.connect(lambda _checked=False, p=period: self._controller.set_period(p))
            group.addAction(action)

    def _add_project(self, menu: QMenu, project: Project) -> None:
        title = f"{project.project}  ({project.total_commits})"
        if self._settings.show_origin_icons and project.origin_display_name:
            title += f"  · {project.origin_display_name}"

        if not self._expansion.is_expanded(project.id):
            submenu = menu.addMenu(title)
            self._add_project_actions(submenu, project)
            for branch in project.branches:
                self._add_branch(submenu, branch, indent="")
            return

        header = menu.addAction(title)
        header.triggered.connect(partial(self._toggle_node, project.id))
        for branch in project.branches:
            self._add_branch(menu, branch, indent="    ")

    def _add_project_actions(self, menu: QMenu, project: Project) -> None:
        expand = menu.addAction("Expand")
        expand.triggered.connect(partial(self._toggle_node, project.id))
        menu.addAction("Open Folder").triggered.connect(
            lambda _checked=False, u=QUrl.fromLocalFile(project.path): QDesktopServices.openUrl(u)
        )
        if project.remote_url:
            menu.addAction("Open in Browser").triggered.connect(
                lambda _checked=False, u=QUrl(project.remote_url): QDesktopServices.openUrl(u)
            )
        menu.addSeparator()

    def _add_branch(self, menu: QMenu, branch: Branch, indent: str) -> None:
        label = f"{indent}{branch.name}  ({len(branch.commits)})"
        if branch.latest_activity:
            label += f"  {branch.latest_activity}"
        submenu = menu.addMenu(label)
        for commit in branch.commits:
            self._add_commit(submenu, commit)

    def _add_commit(self, menu: QMenu, commit: Commit) -> None:
        prefix = f"[{commit.commit_type}] " if commit.commit_type else ""
        suffix = ""
        if self._settings.show_diff_stats and commit.diff_stat is not None:
            suffix = f"  +{commit.diff_stat.insertions} -{commit.diff_stat.deletions}"
        action = menu.addAction(f"{prefix}{commit.display_message}  · {commit.relative_time}{suffix}")
        if commit.url:
            action.triggered.connect(lambda _checked=False, u=QUrl(commit.url): QDesktopServices.openUrl(u))
        else:
            action.setEnabled(False)

    def _add_settings_menu(self, menu: QMenu, snapshot: ControllerSnapshot) -> None:
        settings_menu = menu.addMenu("Settings")
        settings_menu.addAction("Choose Folder...").triggered.connect(lambda _checked=False: self._choose_folder())

        interval_menu = settings_menu.addMenu("Auto-refresh")
        group = QActionGroup(interval_menu)
        for label, seconds in REFRESH_INTERVAL_CHOICES:
            action = interval_menu.addAction(label)
            action.setCheckable(True)
            action.setChecked(snapshot.refresh_interval_seconds == seconds)
            action.triggered.connect(lambda _checked=False, s=seconds: self._controller.set_refresh_interval(s))
            group.addAction(action)

        badge_menu = settings_menu.addMenu("Menubar count")
        badge_group = QActionGroup(badge_menu)
        for mode in BadgeMode:
            action = badge_menu.addAction(mode.value.capitalize())
            action.setCheckable(True)
            action.setChecked(mode is snapshot.badge_mode)
            action.triggered.connect(lambda _checked=False, m=mode: self._controller.set_badge_mode(m))
            badge_group.addAction(action)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _toggle_node(self, node_id: str, _checked: bool = False) -> None:
        self._expansion.toggle(node_id)
        self._rebuild_menu()

    def _choose_folder(self) -> None:
        directory: Optional[str] = QFileDialog.getExistingDirectory(
            None, "Choose folder to scan", self._snapshot.scan_path
        )
        if directory:
            logger.info("Scan path changed to %s", directory)
            self._controller.set_scan_path(directory)
