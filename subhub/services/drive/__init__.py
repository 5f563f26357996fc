from subhub.services.drive.auth import DriveTokenProvider
from subhub.services.drive.client import DriveClient, share_link
from subhub.services.drive.progress import ProgressSnapshot, ProgressThrottle
from subhub.services.drive.uploads import UploadJob, UploadOrchestrator, UploadRegistry, iter_file

__all__ = [
    "DriveTokenProvider",
    "DriveClient",
    "share_link",
    "ProgressSnapshot",
    "ProgressThrottle",
    "UploadJob",
    "UploadOrchestrator",
    "UploadRegistry",
    "iter_file",
]
