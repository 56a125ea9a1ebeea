# import all models for Alembic
from solarcrm.db.models.user import User, UserFirm
from solarcrm.db.models.firm import Firm
from solarcrm.db.models.client import Client
from solarcrm.db.models.crew import Crew, CrewMember
from solarcrm.db.models.project import Project
from solarcrm.db.models.project_history import ProjectHistory
from solarcrm.db.models.project_note import ProjectNote
from solarcrm.db.models.reclamation import Reclamation, ReclamationHistory
