from core.imports import Blueprint, jsonify, request, create_access_token, current_app, IntegrityError
from core.extensions import db, bcrypt
from models.userModel import Users

auth_bp = Blueprint('auth', __name__)

SIGNUP_ROLES = ("buyer", "seller")


def seed_demo_users():
    demo_users = [
        {"name": "Ravi Seller", "email": "demo@seller.com", "phone": "9876543210", "role": "seller"},
        {"name": "Asha Buyer", "email": "demo@buyer.com", "phone": "9123456780", "role": "buyer"},
    ]
    raw_password = "password123"  # demo login password

    for details in demo_users:
        if Users.query.filter_by(email=details["email"]).first():
            current_app.logger.info("Demo %s already exists.", details["role"])
            continue
        hashed_password = bcrypt.generate_password_hash(raw_password).decode('utf-8')
        db.session.add(Users(password=hashed_password, **details))
        current_app.logger.info("Demo %s created (email=%s)", details["role"], details["email"])
    db.session.commit()


@auth_bp.route('/api/auth/register', methods=['POST'])
def register():
    """
    Register a buyer or seller account
    ---
    tags:
      - Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - name
            - email
            - password
          properties:
            name:
              type: string
            email:
              type: string
            password:
              type: string
            phone:
              type: string
            role:
              type: string
              enum: [buyer, seller]
    responses:
      201:
        description: Account created
      400:
        description: Missing fields or invalid role
      409:
        description: Email already registered
    """
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    email = (data.get('email') or "").strip().lower()
    password = data.get('password')
    role = data.get('role', "buyer")

    if not all([name, email, password]):
        return jsonify({"message": "All required fields must be filled"}), 400
    if role not in SIGNUP_ROLES:
        return jsonify({"message": "Role must be buyer or seller"}), 400

    if Users.query.filter_by(email=email).first():
        return jsonify({"message": "Account with this email already exists"}), 409

    user = Users(
        name=name,
        email=email,
        phone=data.get('phone'),
        password=bcrypt.generate_password_hash(password).decode('utf-8'),
        role=role,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "Account with this email already exists"}), 409

    return jsonify({"message": "Account created", "user": {**user.to_public_dict(), "role": user.role}}), 201


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    """
    Log in and receive a bearer token
    ---
    tags:
      - Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            email:
              type: string
              example: "demo@buyer.com"
            password:
              type: string
              example: "password123"
    responses:
      200:
        description: Login successful
      400:
        description: Email and password are required
      401:
        description: Invalid credentials
    """
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or "").strip().lower()
    password = data.get('password')

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    user = Users.query.filter_by(email=email).first()
    if not user or not bcrypt.check_password_hash(user.password, password):
        return jsonify({"message": "Invalid credentials"}), 401

    access_token = create_access_token(
        identity=user.id,
        additional_claims={"role": user.role}
    )

    return jsonify({
        "message": "Login successful",
        "access_token": access_token,
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role
        }
    }), 200
