"""Exception hierarchy for declarative routing errors."""


class RoutingError(Exception):
    """Base exception for all declarative routing errors.

    This is the parent class for all exceptions raised by the
    declarative-routing package. Catching this exception will catch
    every installation-time failure.

    Example:
        try:
            router.install_class(UserController)
        except RoutingError as e:
            logger.error(f"Failed to install routes: {e}")
    """


class RuleSyntaxError(RoutingError):
    """Raised when a path rule has invalid placeholder syntax.

    Examples of invalid syntax:
        - Unbalanced braces: users/{id, users/id}
        - Empty or non-identifier names: {}, {1st}, {user-id}
        - The same placeholder twice: {id}/{id?}

    Example:
        RuleSyntaxError("Unclosed placeholder in rule 'users/{id'")
    """


class ConstraintError(RoutingError):
    """Raised when a constraint fragment is not a valid regular expression.

    Example:
        ConstraintError(
            "Invalid constraint for 'id' in rule 'users/{id}': "
            "unterminated character set"
        )
    """


class RouteValidationError(RoutingError):
    """Raised for invalid route configuration values.

    This exception is raised when:
        - Middleware is neither a name, a sequence of names nor a mapping
        - A cache hint is negative or not an integer
        - A method or domain token is empty

    Example:
        RouteValidationError("middleware must be a str, sequence or mapping, got int")
    """


class DeclarationError(RoutingError):
    """Raised when routing decorators are misapplied.

    This exception is raised when:
        - @controller or @resource decorates something that is not a class
        - @endpoint decorates something that is not callable
        - A group decorator is used without parentheses

    Example:
        DeclarationError("@controller can only decorate classes, got function")
    """


class RouteTableFrozenError(RoutingError):
    """Raised when a route is inserted into a frozen route table.

    Example:
        RouteTableFrozenError("Cannot insert route 'users/{id}': route table is frozen")
    """
