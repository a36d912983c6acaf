# retail_pos/common/response.py

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class SuccessResponse:
    @staticmethod
    def send(data=None, message="Success", status_code=200):
        response = {
            "success": True,
            "message": message,
            "data": jsonable_encoder(data)
        }
        return JSONResponse(content=response, status_code=status_code)


class ErrorResponse:
    @staticmethod
    def send(message="An error occurred", status_code=500, errors=None):
        response = {
            "success": False,
            "message": message,
            "errors": jsonable_encoder(errors) if errors else []
        }
        return JSONResponse(content=response, status_code=status_code)
