"""Built-in GitHub resource handlers; importing registers them."""

from .deploy_key import RepositoryDeployKey as RepositoryDeployKey
from .membership import Membership as Membership
from .repository_file import RepositoryFile as RepositoryFile
