"""
Treatment-plan and full-report rendering (workbook, PDF, print page).

Entry points live in apps.planner.export_render.orchestrator.
"""
