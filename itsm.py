from helpdesk import create_app, db
from helpdesk.models import AuditLog, License, Role, SystemSetting, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Role": Role,
        "License": License,
        "SystemSetting": SystemSetting,
        "AuditLog": AuditLog,
    }


if __name__ == '__main__':
    app.run(debug=True)
