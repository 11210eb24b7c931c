# -*- coding: utf-8 -*-
########################
# overlay_renderer.py
########################
# Purpose:
# - Gameplay grid Qt widget.
# - Renders the 3x3 grid, the live circles and their judgement feedback.
#
########################
# Key Logic:
# - Geometry is owned here. The engine never computes pixel positions.
# - Each frame reads SessionController.target_views():
#   - unresolved circles grow with TargetView.growth and travel from the top center of the
#     widget to their cell center (cosmetic interpolation only)
#   - resolved circles snap to their cell center and take the rating color
# - Mouse presses on a playable cell emit cellTapped(cell_index).
#
########################
# Interfaces:
# Public dataclasses:
# - OverlayConfig(grid_margin_pixels: float, cell_gap_pixels: float, max_grid_pixels: float, ...)
#
# Public functions:
# - color_for_view(view: TargetView) -> QColor
#
# Public classes:
# - class GridOverlayWidget(PyQt6.QtWidgets.QWidget)
#   - Signals:
#     - cellTapped(int)
#   - set_session_controller(controller: Optional[SessionController]) -> None
#   - set_state_text(state_text: str) -> None
#   - cell_rect(cell_index: int) -> QRectF
#   - cell_at(point: QPointF) -> Optional[int]
#
# Inputs:
# - SessionController snapshots (target views and score state).
#
# Outputs:
# - Painted grid visuals and tap signals.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from PyQt6.QtCore import QPointF, QRectF, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

import gameplay_models
import session_controller


@dataclass(frozen=True)
class OverlayConfig:
    grid_margin_pixels: float = 24.0
    cell_gap_pixels: float = 8.0
    max_grid_pixels: float = 400.0
    hud_height_pixels: float = 36.0
    paint_interval_ms: int = 16


_RATING_COLORS = {
    gameplay_models.HitRating.PERFECT: QColor("#fbbf24"),
    gameplay_models.HitRating.GREAT: QColor("#22c55e"),
    gameplay_models.HitRating.GOOD: QColor("#3b82f6"),
    gameplay_models.HitRating.OK: QColor("#10b981"),
}
_MISS_COLOR = QColor("#ef4444")
_LIVE_COLOR = QColor("#d93900")


def color_for_view(view: gameplay_models.TargetView) -> QColor:
    if view.rating is not None:
        return QColor(_RATING_COLORS.get(view.rating, QColor("#22c55e")))
    if isinstance(view.resolution, gameplay_models.Missed):
        return QColor(_MISS_COLOR)
    return QColor(_LIVE_COLOR)


class GridOverlayWidget(QWidget):
    cellTapped = pyqtSignal(int)

    def __init__(
        self,
        *,
        config: Optional[OverlayConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or OverlayConfig()
        self._controller: Optional[session_controller.SessionController] = None
        self._state_text = ""

        self.setMinimumSize(240, 280)

        self._paint_timer = QTimer(self)
        self._paint_timer.setInterval(int(self._config.paint_interval_ms))
        self._paint_timer.timeout.connect(self.update)
        self._paint_timer.start()

    def set_session_controller(self, controller: Optional[session_controller.SessionController]) -> None:
        self._controller = controller

    def set_state_text(self, state_text: str) -> None:
        self._state_text = str(state_text or "")

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _grid_rect(self) -> QRectF:
        config = self._config
        available_width = float(self.width()) - 2.0 * config.grid_margin_pixels
        available_height = float(self.height()) - 2.0 * config.grid_margin_pixels - 2.0 * config.hud_height_pixels
        side = max(0.0, min(available_width, available_height, float(config.max_grid_pixels)))
        left = (float(self.width()) - side) / 2.0
        top = config.hud_height_pixels + (float(self.height()) - 2.0 * config.hud_height_pixels - side) / 2.0
        return QRectF(left, top, side, side)

    def cell_rect(self, cell_index: int) -> QRectF:
        grid = self._grid_rect()
        gap = float(self._config.cell_gap_pixels)
        size = gameplay_models.GRID_SIZE
        cell_side = max(0.0, (grid.width() - gap * (size - 1)) / size)
        row, column = divmod(int(cell_index), size)
        return QRectF(
            grid.left() + column * (cell_side + gap),
            grid.top() + row * (cell_side + gap),
            cell_side,
            cell_side,
        )

    def cell_at(self, point: QPointF) -> Optional[int]:
        for cell_index in range(gameplay_models.CELL_COUNT):
            if self.cell_rect(cell_index).contains(point):
                return cell_index
        return None

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        cell_index = self.cell_at(event.position())
        if cell_index is not None and gameplay_models.is_playable_cell(cell_index):
            self.cellTapped.emit(int(cell_index))
        event.accept()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), QBrush(QColor(250, 250, 250)))

        self._paint_cells(painter)
        if self._controller is not None:
            self._paint_targets(painter, self._controller.target_views())
            self._paint_hud(painter, self._controller)
        self._paint_state_text(painter)

        painter.end()

    # ------------------------------------------------------------------
    # Painting helpers
    # ------------------------------------------------------------------

    def _paint_cells(self, painter: QPainter) -> None:
        for cell_index in range(gameplay_models.CELL_COUNT):
            rect = self.cell_rect(cell_index)
            is_center = cell_index == gameplay_models.CENTER_INDEX
            painter.save()
            painter.setPen(QPen(QColor(209, 213, 219) if is_center else QColor(156, 163, 175), 2.0))
            painter.setBrush(QBrush(QColor(229, 231, 235) if is_center else QColor(255, 255, 255)))
            painter.drawRoundedRect(rect, 8.0, 8.0)
            painter.restore()

    def _paint_targets(self, painter: QPainter, views: List[gameplay_models.TargetView]) -> None:
        spawn_point = QPointF(float(self.width()) / 2.0, 0.0)

        for view in views:
            if not gameplay_models.is_playable_cell(view.cell_index):
                continue
            rect = self.cell_rect(view.cell_index)
            target_point = rect.center()
            growth = float(view.growth)

            if view.resolution.is_resolved:
                center = target_point
            else:
                center = QPointF(
                    spawn_point.x() + (target_point.x() - spawn_point.x()) * growth,
                    spawn_point.y() + (target_point.y() - spawn_point.y()) * growth,
                )

            radius = min(rect.width(), rect.height()) / 2.0 * growth

            painter.save()
            painter.setOpacity(1.0 if view.resolution.is_resolved else 0.8)
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(color_for_view(view)))
            painter.drawEllipse(center, radius, radius)
            painter.restore()

            if view.rating is not None:
                painter.save()
                painter.setPen(QPen(QColor(255, 255, 255)))
                painter.setFont(QFont("Arial", 12, weight=QFont.Weight.Bold))
                painter.drawText(rect, int(Qt.AlignmentFlag.AlignCenter), view.rating.value.upper())
                painter.restore()

    def _paint_hud(self, painter: QPainter, controller: session_controller.SessionController) -> None:
        score_state = controller.score_state()
        hud_text = (
            f"Perfect {score_state.perfect_count}  Great {score_state.great_count}  "
            f"Good {score_state.good_count}  OK {score_state.ok_count}  Miss {score_state.miss_count}  "
            f"Combo {score_state.combo}  Max {score_state.max_combo}"
        )
        painter.save()
        painter.setPen(QPen(QColor(17, 24, 39)))
        painter.setFont(QFont("Arial", 11))
        painter.drawText(
            QRectF(10.0, 10.0, float(self.width()) - 20.0, 22.0),
            int(Qt.AlignmentFlag.AlignHCenter),
            hud_text,
        )
        painter.restore()

    def _paint_state_text(self, painter: QPainter) -> None:
        text = str(self._state_text or "").strip()
        if not text:
            return
        painter.save()
        painter.setPen(QPen(QColor(75, 85, 99)))
        painter.setFont(QFont("Arial", 12))
        painter.drawText(
            QRectF(0.0, float(self.height()) - 28.0, float(self.width()), 20.0),
            int(Qt.AlignmentFlag.AlignHCenter),
            text,
        )
        painter.restore()
