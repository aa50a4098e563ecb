"""
Print surface: a standalone HTML page whose only printable region is the
treatment plan.
"""
from __future__ import annotations

from xml.sax.saxutils import escape

from apps.planner.export_render.common import format_generated_at
from apps.planner.export_render.constants import (
    CLINICAL_BLUE,
    DOSE_MARKER,
    LIGHT_BLUE,
    SCHEDULE_TABLE_COLUMNS,
    SERVICE_NAME,
)
from apps.planner.project.models import TreatmentReport

_STYLE = f"""
body {{ font-family: Helvetica, Arial, sans-serif; color: #1A1A1A; }}
h1, h2 {{ color: #{CLINICAL_BLUE}; }}
table {{ border-collapse: collapse; width: 100%; margin-bottom: 16px; }}
th {{ background: #{CLINICAL_BLUE}; color: #fff; font-size: 10px; }}
td, th {{ border: 1px solid #999; padding: 3px; }}
td.marker {{ text-align: center; font-weight: bold; color: #{CLINICAL_BLUE}; }}
tr.instructions td {{ background: #{LIGHT_BLUE}; font-size: 11px; }}
.screen-only {{ display: block; }}
@media print {{
  .screen-only {{ display: none; }}
  body * {{ visibility: hidden; }}
  #print-area, #print-area * {{ visibility: visible; }}
  #print-area {{ position: absolute; left: 0; top: 0; }}
}}
"""


def _row(cells, tag: str = "td", marker: str | None = None) -> str:
    parts = []
    for cell in cells:
        text = escape("" if cell is None else str(cell)).replace("\n", "<br>")
        css = ' class="marker"' if marker is not None and cell == marker else ""
        parts.append(f"<{tag}{css}>{text}</{tag}>")
    return "<tr>" + "".join(parts) + "</tr>"


def _matrix_html(report: TreatmentReport) -> str:
    matrix = report.matrix
    out = ["<table>", _row(matrix.header, tag="th")]
    for row, cells in zip(matrix.rows, matrix.body()):
        if row.kind == "instructions":
            out.append(
                f'<tr class="instructions"><td colspan="{matrix.width}">{escape(cells[0])}</td></tr>'
            )
        else:
            out.append(_row(cells, marker=DOSE_MARKER))
    out.append("</table>")
    return "\n".join(out)


def build_print_html(report: TreatmentReport) -> str:
    p = report.patient
    preview = []
    for group in report.preview:
        items = "".join(
            f"<li>{escape(item.icon)} <strong>{escape(item.comercial_name)}</strong>"
            f" ({escape(', '.join(item.hours_display))})</li>"
            for item in group.items
        )
        preview.append(f"<h3>{escape(group.name)}</h3><ul>{items}</ul>")

    schedule = ["<table>", _row(SCHEDULE_TABLE_COLUMNS, tag="th")]
    schedule.extend(_row(r) for r in report.schedule_rows)
    schedule.append("</table>")

    warnings = "".join(f"<li>{escape(w)}</li>" for w in report.warnings)
    signature = (
        "<p>_________________________<br>Firma del Farmacéutico</p>" if report.pharmacist_signature else ""
    )

    return f"""<!DOCTYPE html>
<html lang="es">
<head>
<meta charset="utf-8">
<title>{escape(report.filename_stem)}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="screen-only">
{''.join(preview)}
</div>
<section id="print-area">
<h1>{escape(report.center_name)}</h1>
<p>{escape(SERVICE_NAME)}</p>
<h2>INFORMACIÓN DEL PACIENTE</h2>
<dl>
<dt>Nombre:</dt><dd>{escape(p.full_name)}</dd>
<dt>Cédula:</dt><dd>{escape(p.cedula)}</dd>
<dt>Edad:</dt><dd>{escape(p.age)}</dd>
<dt>Alergias/Contraindicaciones:</dt><dd>{escape(p.medical_conditions)}</dd>
</dl>
<h2>PLANNING VISUAL - MATRIZ HORARIA</h2>
{_matrix_html(report)}
<h2>PAUTA DE ADMINISTRACIÓN DE MEDICAMENTOS</h2>
{chr(10).join(schedule)}
<h2>ADVERTENCIAS IMPORTANTES</h2>
<ul>{warnings}</ul>
<footer>
{signature}
<p>Generado el: {escape(format_generated_at(report.generated_at))}</p>
</footer>
</section>
</body>
</html>
"""
