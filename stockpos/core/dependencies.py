from fastapi import Request

# Los servicios se construyen en create_app y viven en app.state

def get_sales_service(request: Request):
    """SalesService de la aplicación"""
    return request.app.state.sales_service

def get_product_service(request: Request):
    """ProductService de la aplicación"""
    return request.app.state.product_service
