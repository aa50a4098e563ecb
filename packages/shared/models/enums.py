from enum import Enum


class IconType(str, Enum):
    PILL = "pill"
    SYRUP = "syrup"
    INJECTION = "injection"
    CAPSULE = "capsule"
    CREAM = "cream"


class Severity(str, Enum):
    LEVE = "leve"
    MODERADA = "moderada"
    GRAVE = "grave"

    @property
    def priority(self) -> int:
        """Canonical report ordering: grave first, leve last."""
        return SEVERITY_PRIORITY[self]


SEVERITY_PRIORITY: dict[Severity, int] = {
    Severity.GRAVE: 0,
    Severity.MODERADA: 1,
    Severity.LEVE: 2,
}


class ReactionStatus(str, Enum):
    PENDIENTE = "pendiente"
    REVISADO = "revisado"
    REPORTADO = "reportado"


ICON_GLYPHS: dict[IconType, str] = {
    IconType.PILL: "💊",
    IconType.SYRUP: "🥤",
    IconType.INJECTION: "💉",
    IconType.CAPSULE: "🟢",
    IconType.CREAM: "🧴",
}
