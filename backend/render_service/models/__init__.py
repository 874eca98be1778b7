from render_service.models.jobs import Job, JobStatus, RenderAccepted, JobStatusResponse, ErrorResponse
from render_service.models.render import RenderRequest, Scene
