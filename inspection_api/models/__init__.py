from .label_template import LabelTemplate  # noqa: F401
from .service_records import (  # noqa: F401
    CustomerVehicleProfile,
    EmissionsTestRecord,
    OilChangeRecord,
    TireInstallationRecord,
)
