from enum import Enum

class MissionType(str, Enum):
    FOLLOW_INSTAGRAM = "follow-instagram"
    CHOOSE_PROPLAYER = "choose-proplayer"

class TemplateType(str, Enum):
    INSTAGRAM = "instagram"
    PROPLAYER = "proplayer"
