"""Domain records, node templates and the resource-access boundary."""

from .compute import ComputeApi as ComputeApi
from .model import HttpError as HttpError
from .model import Image as Image
from .model import Instance as Instance
from .model import InstanceTemplate as InstanceTemplate
from .model import ListOptions as ListOptions
from .model import ListPage as ListPage
from .model import MachineType as MachineType
from .model import NetworkInterface as NetworkInterface
from .model import Operation as Operation
from .model import OperationStatus as OperationStatus
from .model import Project as Project
from .model import ServiceAccount as ServiceAccount
from .model import Zone as Zone
from .template import GCETemplateOptions as GCETemplateOptions
from .template import Hardware as Hardware
from .template import Location as Location
from .template import LoginCredentials as LoginCredentials
from .template import NodeAndInitialCredentials as NodeAndInitialCredentials
from .template import Template as Template
from .template import TemplateImage as TemplateImage
from .template import TemplateOptions as TemplateOptions
