from routes.attendance_routes import attendance_routes
from routes.boq_bill_routes import boq_bill_routes
from routes.stock_routes import stock_routes

# Import and register the routes from the route blueprints

def initialize_routes(app):
    app.register_blueprint(attendance_routes)
    app.register_blueprint(boq_bill_routes)
    app.register_blueprint(stock_routes)
