"""
Graphly desktop viewer.

A pyqtgraph chart driven entirely by ``ViewportController``: pyqtgraph's own
mouse handling is disabled and wheel, drag and pinch events are translated
into controller gestures in ``ChartWindow.eventFilter``.
"""

from __future__ import annotations

import logging
import math
import sys
from pathlib import Path
from typing import Any, Optional

import pyqtgraph as pg
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QCursor, QMouseEvent, QTouchEvent, QWheelEvent
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QDialog,
    QFileDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from graphly.dataset import (
    Dataset,
    DatasetView,
    build_views,
    data_bounds,
    new_data_dataset,
    new_function_dataset,
    with_cell,
    with_row_added,
    with_row_removed,
    with_trendline,
    with_visibility,
)
from graphly.formatting import format_number
from graphly.latex import LaTeXGenerator
from graphly.logs import setup_logger
from graphly.regression import RegressionKind
from graphly.settings import ASPECT_RATIOS, ChartSettings
from graphly.tabular import dataset_from_table, export_csv, parse_delimited
from graphly.viewport import ViewportController

logger = logging.getLogger(__name__)

# Ocean, Sunset, Forest, Berry, Midnight, Cherry, Teal, Noir
_THEME_COLORS: tuple[tuple[int, int, int], ...] = (
    (14, 165, 233),
    (249, 115, 22),
    (16, 185, 129),
    (217, 70, 239),
    (99, 102, 241),
    (239, 68, 68),
    (20, 184, 166),
    (30, 41, 59),
)
_TRENDLINE_COLOR: tuple[int, int, int] = (239, 68, 68)
_NO_TRENDLINE: str = "none"


def _optional_float(text: str) -> Optional[float]:
    text = text.strip()
    return float(text) if text else None


# ===========================================================================
# Settings dialog
# ===========================================================================

class SettingsDialog(QDialog):

    def __init__(self, settings: ChartSettings, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Chart Settings")
        self._settings = settings
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QGridLayout(self)

        self._aspect_cb = QComboBox()
        self._aspect_cb.addItems(list(ASPECT_RATIOS))
        self._aspect_cb.setCurrentText(self._settings.aspect_ratio)

        self._zoom_chk = QCheckBox("Enable pan and zoom")
        self._zoom_chk.setChecked(self._settings.enable_zoom)
        self._grid_chk = QCheckBox("Show grid lines")
        self._grid_chk.setChecked(self._settings.show_grid)

        def interval_text(v: Optional[float]) -> str:
            return "" if v is None else str(v)

        self._x_interval_edit = QLineEdit(interval_text(self._settings.x_grid_interval))
        self._y_interval_edit = QLineEdit(interval_text(self._settings.y_grid_interval))
        for edit in (self._x_interval_edit, self._y_interval_edit):
            edit.setPlaceholderText("auto")
        self._x_label_edit = QLineEdit(self._settings.x_axis_label)
        self._y_label_edit = QLineEdit(self._settings.y_axis_label)

        self._latex_approx_chk = QCheckBox("Approximate coefficients (decimals)")
        self._latex_approx_chk.setChecked(self._settings.latex_approx)
        self._latex_decimals_sb = QSpinBox()
        self._latex_decimals_sb.setRange(0, 10)
        self._latex_decimals_sb.setValue(self._settings.latex_decimals)
        self._latex_approx_chk.toggled.connect(self._latex_decimals_sb.setEnabled)
        self._latex_decimals_sb.setEnabled(self._settings.latex_approx)

        fields: list[tuple[str, QWidget]] = [
            ("Aspect ratio:", self._aspect_cb),
            ("X grid interval:", self._x_interval_edit),
            ("Y grid interval:", self._y_interval_edit),
            ("X axis label:", self._x_label_edit),
            ("Y axis label:", self._y_label_edit),
        ]
        for row, (label, widget) in enumerate(fields):
            layout.addWidget(QLabel(label), row, 0)
            layout.addWidget(widget, row, 1)

        row = len(fields)
        layout.addWidget(self._zoom_chk, row, 0, 1, 2)
        layout.addWidget(self._grid_chk, row + 1, 0, 1, 2)
        layout.addWidget(self._latex_approx_chk, row + 2, 0, 1, 2)
        layout.addWidget(QLabel("Digits after decimal point:"), row + 3, 0)
        layout.addWidget(self._latex_decimals_sb, row + 3, 1)

        btn_row = QHBoxLayout()
        ok_btn = QPushButton("OK")
        cancel_btn = QPushButton("Cancel")
        ok_btn.clicked.connect(self.accept)
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(ok_btn)
        btn_row.addWidget(cancel_btn)
        layout.addLayout(btn_row, row + 4, 0, 1, 2)

    def get_settings(self) -> ChartSettings:
        """Raises ValueError when a field is invalid."""
        return self._settings.updated(
            aspect_ratio=self._aspect_cb.currentText(),
            enable_zoom=self._zoom_chk.isChecked(),
            show_grid=self._grid_chk.isChecked(),
            x_grid_interval=_optional_float(self._x_interval_edit.text()),
            y_grid_interval=_optional_float(self._y_interval_edit.text()),
            x_axis_label=self._x_label_edit.text() or "X",
            y_axis_label=self._y_label_edit.text() or "Y",
            latex_approx=self._latex_approx_chk.isChecked(),
            latex_decimals=int(self._latex_decimals_sb.value()),
        )


# ===========================================================================
# Main window
# ===========================================================================

class ChartWindow(QMainWindow):

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Graphly")
        self.setGeometry(100, 100, 1300, 780)

        self._settings = ChartSettings()
        self._controller = ViewportController(self._settings)
        self._latex_gen = LaTeXGenerator(
            approx=self._settings.latex_approx,
            decimals=self._settings.latex_decimals,
        )
        self._datasets: list[Dataset] = []
        self._curves: list[Any] = []

        self._dragging = False
        self._last_pos: Optional[QPointF] = None

        self._build_ui()
        self.redraw()

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        root = QHBoxLayout(central)

        left = QVBoxLayout()
        self._plot_widget = pg.PlotWidget()
        self._plot_widget.addLegend(offset=(10, 10))
        left.addWidget(self._plot_widget)

        btn_row = QHBoxLayout()
        buttons = (
            ("Zoom In", self.zoom_in),
            ("Zoom Out", self.zoom_out),
            ("Reset View", self.reset_view),
            ("Open CSV", self.open_csv),
            ("Export CSV", self.save_csv),
            ("Settings", self.show_settings),
        )
        for text, slot in buttons:
            btn = QPushButton(text)
            btn.clicked.connect(slot)
            btn_row.addWidget(btn)
        left.addLayout(btn_row)
        root.addLayout(left, 3)

        right = QVBoxLayout()
        right.addWidget(QLabel("Function y = f(x):"))
        fn_row = QHBoxLayout()
        self._equation_edit = QLineEdit()
        self._equation_edit.setPlaceholderText("e.g. sin(x)*x or 2x^2+3")
        self._equation_edit.returnPressed.connect(self.add_function)
        add_btn = QPushButton("Add")
        add_btn.clicked.connect(self.add_function)
        fn_row.addWidget(self._equation_edit)
        fn_row.addWidget(add_btn)
        right.addLayout(fn_row)

        right.addWidget(QLabel("Dataset:"))
        ds_row = QHBoxLayout()
        self._dataset_cb = QComboBox()
        self._dataset_cb.currentIndexChanged.connect(self._sync_dataset_controls)
        self._visible_chk = QCheckBox("Visible")
        self._visible_chk.toggled.connect(self.set_visible)
        delete_btn = QPushButton("Delete")
        delete_btn.clicked.connect(self.delete_dataset)
        ds_row.addWidget(self._dataset_cb, 2)
        ds_row.addWidget(self._visible_chk)
        ds_row.addWidget(delete_btn)
        right.addLayout(ds_row)

        trend_row = QHBoxLayout()
        trend_row.addWidget(QLabel("Trendline:"))
        self._trend_cb = QComboBox()
        self._trend_cb.addItems([_NO_TRENDLINE] + [k.value for k in RegressionKind])
        self._trend_cb.currentTextChanged.connect(self.set_trendline)
        trend_row.addWidget(self._trend_cb, 1)
        right.addLayout(trend_row)

        self._table = QTableWidget(0, 2)
        self._table.cellChanged.connect(self._on_cell_changed)
        right.addWidget(self._table, 1)
        table_btns = QHBoxLayout()
        for text, slot in (
            ("New Data", self.add_data_dataset),
            ("Add Row", self.add_row),
            ("Remove Row", self.remove_row),
        ):
            btn = QPushButton(text)
            btn.clicked.connect(slot)
            table_btns.addWidget(btn)
        right.addLayout(table_btns)

        right.addWidget(QLabel("Summary:"))
        self._summary = QTextEdit()
        self._summary.setReadOnly(True)
        self._summary.setFontFamily("Courier New")
        right.addWidget(self._summary)
        root.addLayout(right, 1)

        vb = self._plot_widget.plotItem.vb
        vb.setMenuEnabled(False)
        vb.setMouseEnabled(x=False, y=False)
        vb.disableAutoRange()
        viewport = self._plot_widget.viewport()
        viewport.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        viewport.installEventFilter(self)

    # ------------------------------------------------------------------
    # Event translation
    # ------------------------------------------------------------------

    def _sync_container(self) -> None:
        rect = self._plot_widget.plotItem.vb.boundingRect()
        self._controller.set_container_size(rect.width(), rect.height())

    def eventFilter(self, obj: Any, event: QEvent) -> bool:  # noqa: N802
        if obj is not self._plot_widget.viewport():
            return super().eventFilter(obj, event)

        et = event.type()

        if et == QEvent.Type.Resize:
            self._sync_container()
            self.redraw()
            return super().eventFilter(obj, event)

        if et == QEvent.Type.Wheel and isinstance(event, QWheelEvent):
            pixel = event.pixelDelta()
            pixel_mode = not pixel.isNull()
            delta = pixel.y() if pixel_mode else event.angleDelta().y()
            if delta == 0:
                # Shift+wheel is delivered as horizontal scroll on some platforms
                delta = pixel.x() if pixel_mode else event.angleDelta().x()
            if delta == 0:
                return True
            mods = event.modifiers()
            self._controller.wheel(
                # Qt reports wheel-away as positive; away means zoom in
                -float(delta),
                pixel_mode=pixel_mode,
                ctrl=bool(mods & Qt.KeyboardModifier.ControlModifier),
                meta=bool(mods & Qt.KeyboardModifier.MetaModifier),
                shift=bool(mods & Qt.KeyboardModifier.ShiftModifier),
            )
            self.redraw()
            return True

        if isinstance(event, QTouchEvent):
            return self._handle_touch(event)

        if not isinstance(event, QMouseEvent):
            return super().eventFilter(obj, event)

        if et == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
            if not self._settings.enable_zoom:
                return True
            self._dragging = True
            self._last_pos = QPointF(event.position())
            self._plot_widget.viewport().setCursor(QCursor(Qt.CursorShape.ClosedHandCursor))
            return True

        if et == QEvent.Type.MouseMove and self._dragging and self._last_pos is not None:
            pos = event.position()
            self._controller.pan_by(pos.x() - self._last_pos.x(), pos.y() - self._last_pos.y())
            self._last_pos = QPointF(pos)
            self.redraw()
            return True

        if et == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
            self._dragging = False
            self._last_pos = None
            self._plot_widget.viewport().unsetCursor()
            return True

        return super().eventFilter(obj, event)

    def _handle_touch(self, event: QTouchEvent) -> bool:
        points = event.points()
        et = event.type()
        if et == QEvent.Type.TouchEnd or not points:
            self._controller.pinch_end()
            self._dragging = False
            self._last_pos = None
            return True

        if len(points) >= 2:
            a, b = points[0].position(), points[1].position()
            distance = math.hypot(a.x() - b.x(), a.y() - b.y())
            if et == QEvent.Type.TouchBegin or self._controller.pinch_distance is None:
                self._controller.pinch_start(distance)
            else:
                self._controller.pinch_move(distance)
                self.redraw()
            return True

        pos = points[0].position()
        if et == QEvent.Type.TouchBegin or self._last_pos is None:
            self._dragging = self._settings.enable_zoom
            self._last_pos = QPointF(pos)
            return True
        if self._dragging:
            self._controller.pan_by(pos.x() - self._last_pos.x(), pos.y() - self._last_pos.y())
            self._last_pos = QPointF(pos)
            self.redraw()
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def redraw(self) -> None:
        self._controller.set_data_bounds(data_bounds(self._datasets))
        domain = self._controller.current_domain()

        for curve in self._curves:
            self._plot_widget.removeItem(curve)
        self._curves = []

        views = build_views(self._datasets, domain, self._settings)
        for idx, view in enumerate(views):
            if view.dataset.visible:
                self._plot_view(idx, view)

        vb = self._plot_widget.plotItem.vb
        vb.setRange(xRange=domain.x, yRange=domain.y, padding=0, update=True)
        self._plot_widget.showGrid(x=self._settings.show_grid, y=self._settings.show_grid, alpha=0.3)
        self._plot_widget.setLabel("bottom", self._settings.x_axis_label)
        self._plot_widget.setLabel("left", self._settings.y_axis_label)
        self._set_ticks("bottom", self._controller.x_ticks())
        self._set_ticks("left", self._controller.y_ticks())
        self._refresh_summary(views)

    def _set_ticks(self, axis_name: str, values: list[float]) -> None:
        labels = [(v, str(format_number(v))) for v in values]
        self._plot_widget.getAxis(axis_name).setTicks([labels, []])

    def _plot_view(self, idx: int, view: DatasetView) -> None:
        color = _THEME_COLORS[idx % len(_THEME_COLORS)]
        xs = [p.x for p in view.points]
        ys = [p.y for p in view.points]
        name = view.dataset.name
        if view.dataset.config.kind == "scatter":
            item = self._plot_widget.plot(
                xs, ys, pen=None, symbol="o", symbolSize=7,
                symbolBrush=pg.mkBrush(color), name=name,
            )
        else:
            item = self._plot_widget.plot(xs, ys, pen=pg.mkPen(color, width=2), name=name)
        self._curves.append(item)

        if view.trendline:
            trend = self._plot_widget.plot(
                [p.x for p in view.trendline], [p.y for p in view.trendline],
                pen=pg.mkPen(_TRENDLINE_COLOR, width=2, style=Qt.PenStyle.DashLine),
                name=f"{name} trend",
            )
            self._curves.append(trend)

    def _refresh_summary(self, views: list[DatasetView]) -> None:
        parts: list[str] = []
        for view in views:
            ds = view.dataset
            if ds.config.is_function:
                latex = self._latex_gen.generate_expression(ds.equation)
                parts.append(
                    f"─── {ds.name}\n"
                    f"    f(x)  : {ds.equation}\n"
                    f"    LaTeX : {latex}\n"
                    f"    shown : {len(view.points)} samples\n"
                )
                continue
            lines = [
                f"─── {ds.name}",
                f"    n       : {view.stats.n}",
                f"    Mean X  : {format_number(view.stats.mean_x)}",
                f"    Mean Y  : {format_number(view.stats.mean_y)}",
                f"    StdDev Y: {format_number(view.stats.std_dev_y)}",
            ]
            if view.equation is not None:
                lines.append(f"    R²      : {format_number(view.r2)}")
                lines.append(f"    Fit     : {view.equation}")
            elif ds.config.show_trendline:
                lines.append("    Fit     : (not enough valid data)")
            parts.append("\n".join(lines) + "\n")
        self._summary.setPlainText("\n".join(parts) if parts else "(no datasets)")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def zoom_in(self) -> None:
        self._controller.zoom_in()
        self.redraw()

    def zoom_out(self) -> None:
        self._controller.zoom_out()
        self.redraw()

    def reset_view(self) -> None:
        self._controller.reset_to_auto()
        self.redraw()

    # ------------------------------------------------------------------
    # Dataset management
    # ------------------------------------------------------------------

    def _selected(self) -> Optional[int]:
        idx = self._dataset_cb.currentIndex()
        return idx if 0 <= idx < len(self._datasets) else None

    def _replace_selected(self, dataset: Dataset) -> None:
        idx = self._selected()
        if idx is None:
            return
        self._datasets[idx] = dataset
        self.redraw()

    def _add_dataset(self, dataset: Dataset) -> None:
        self._datasets.append(dataset)
        self._dataset_cb.addItem(dataset.name)
        self._dataset_cb.setCurrentIndex(len(self._datasets) - 1)
        self.redraw()

    def add_function(self) -> None:
        text = self._equation_edit.text().strip()
        if not text:
            return
        dataset = new_function_dataset(text)
        self._add_dataset(dataset)
        self._equation_edit.clear()
        view = build_views([dataset], self._controller.current_domain(), self._settings)[0]
        if not view.points:
            QMessageBox.warning(self, "No Curve", f"Nothing could be drawn for '{text}'.")

    def add_data_dataset(self) -> None:
        self._add_dataset(new_data_dataset(f"Dataset {len(self._datasets) + 1}"))

    def delete_dataset(self) -> None:
        idx = self._selected()
        if idx is None:
            return
        del self._datasets[idx]
        self._dataset_cb.removeItem(idx)
        self.redraw()

    def set_visible(self, visible: bool) -> None:
        idx = self._selected()
        if idx is not None:
            self._replace_selected(with_visibility(self._datasets[idx], visible))

    def set_trendline(self, kind_text: str) -> None:
        idx = self._selected()
        if idx is None or self._datasets[idx].config.is_function:
            return
        kind = None if kind_text == _NO_TRENDLINE else kind_text
        self._replace_selected(with_trendline(self._datasets[idx], kind))

    def add_row(self) -> None:
        idx = self._selected()
        if idx is None or self._datasets[idx].config.is_function:
            return
        self._replace_selected(with_row_added(self._datasets[idx]))
        self._fill_table()

    def remove_row(self) -> None:
        idx = self._selected()
        row = self._table.currentRow()
        if idx is None or not (0 <= row < len(self._datasets[idx].rows)):
            return
        self._replace_selected(with_row_removed(self._datasets[idx], row))
        self._fill_table()

    def _on_cell_changed(self, row: int, column: int) -> None:
        idx = self._selected()
        item = self._table.item(row, column)
        if idx is None or item is None:
            return
        cfg = self._datasets[idx].config
        key = cfg.x_key if column == 0 else cfg.y_key
        self._replace_selected(with_cell(self._datasets[idx], row, key, item.text()))

    def _sync_dataset_controls(self, idx: int) -> None:
        if not (0 <= idx < len(self._datasets)):
            self._fill_table()
            return
        ds = self._datasets[idx]
        cfg = ds.config
        for widget in (self._trend_cb, self._visible_chk):
            widget.blockSignals(True)
        self._trend_cb.setCurrentText(
            cfg.trendline_kind.value if cfg.show_trendline else _NO_TRENDLINE
        )
        self._trend_cb.setEnabled(not cfg.is_function)
        self._visible_chk.setChecked(ds.visible)
        for widget in (self._trend_cb, self._visible_chk):
            widget.blockSignals(False)
        self._fill_table()

    def _fill_table(self) -> None:
        idx = self._selected()
        self._table.blockSignals(True)
        self._table.setRowCount(0)
        if idx is not None and not self._datasets[idx].config.is_function:
            ds = self._datasets[idx]
            keys = (ds.config.x_key, ds.config.y_key)
            self._table.setHorizontalHeaderLabels(list(keys))
            self._table.setRowCount(len(ds.rows))
            for r, row in enumerate(ds.rows):
                for c, key in enumerate(keys):
                    value = row.get(key)
                    self._table.setItem(r, c, QTableWidgetItem("" if value is None else str(value)))
        self._table.setEnabled(idx is not None and not self._datasets[idx].config.is_function)
        self._table.blockSignals(False)

    def open_csv(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open data", "", "Data files (*.csv *.tsv *.txt);;All files (*)"
        )
        if not path:
            return
        try:
            text = Path(path).read_text(encoding="utf-8")
            dataset = dataset_from_table(parse_delimited(text), Path(path).stem)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            QMessageBox.critical(self, "Import Error", str(exc))
            return
        logger.info("Imported %d rows from %s", len(dataset.rows), path)
        self._add_dataset(dataset)

    def save_csv(self) -> None:
        if not self._datasets:
            QMessageBox.information(self, "Export", "There are no datasets to export.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export CSV", "export.csv", "CSV (*.csv)")
        if not path:
            return
        try:
            # function datasets export as blank column pairs
            Path(path).write_text(export_csv(self._datasets), encoding="utf-8", newline="")
        except OSError as exc:
            QMessageBox.critical(self, "Export Error", str(exc))

    def show_settings(self) -> None:
        dlg = SettingsDialog(self._settings, self)
        if not dlg.exec():
            return
        try:
            new_s = dlg.get_settings()
        except ValueError as exc:
            QMessageBox.critical(self, "Invalid Settings", str(exc))
            return
        self._settings = new_s
        self._controller.set_settings(new_s)
        self._latex_gen.reconfigure(new_s.latex_approx, new_s.latex_decimals)
        self.redraw()


# ===========================================================================
# Entry point
# ===========================================================================

def main() -> None:
    setup_logger("graphly")
    app = QApplication(sys.argv)
    window = ChartWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
