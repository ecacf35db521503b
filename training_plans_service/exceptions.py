from fastapi import HTTPException, status


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Object not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PlanTemplateNotFoundException(NotFoundException):
    def __init__(self, template_id: int):
        super().__init__(detail=f"Plan template with id={template_id} not found")


class PlanWeekNotFoundException(NotFoundException):
    def __init__(self, week_id: int):
        super().__init__(detail=f"Plan week with id={week_id} not found")


class PlanDayNotFoundException(NotFoundException):
    def __init__(self, plan_day_id: int):
        super().__init__(detail=f"Plan day with id={plan_day_id} not found")


class PrescriptionNotFoundException(NotFoundException):
    def __init__(self, prescription_id: int):
        super().__init__(detail=f"Plan prescription with id={prescription_id} not found")


class ProgressEntryNotFoundException(NotFoundException):
    """Raised for missing progress rows and for rows owned by another user alike."""

    def __init__(self, progress_id: int):
        super().__init__(detail=f"Plan progress entry with id={progress_id} not found")


class InvalidStateException(HTTPException):
    def __init__(self, detail: str = "Invalid state"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class NoMatchingTemplateException(InvalidStateException):
    def __init__(self):
        super().__init__(detail="No matching template found for selected settings")
