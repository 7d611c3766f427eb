"""ghspec - declarative management of GitHub deploy keys, memberships and repository files."""

from . import resources as resources
from .blueprints import Blueprint as Blueprint
from .client import GitHubClient as GitHubClient
from .context import Context as Context
from .projects import Project as Project
from .provider import Owner as Owner
from .provider import ProviderConfig as ProviderConfig
from .provider import configure as configure
from .resource import Resource as Resource
from .resource import resource as resource
from .schema import ResourceData as ResourceData
from .spec import ResourceSpec as ResourceSpec
from .spec import Specification as Specification
from .specop import Absent as Absent
from .specop import Ensure as Ensure
from .specop import Present as Present
from .specop import SpecOp as SpecOp
from .state import StateStore as StateStore
from .workspace import Workspace as Workspace
