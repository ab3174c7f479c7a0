"""
Client-side view state and flows: cart, checkout, order history and the
admin order monitor. Rendering is left to whatever UI drives these objects.
"""
