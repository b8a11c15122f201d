"""
Unit tests for model classes.

Tests cover:
- Construction from data and keywords
- Defaults, zero values and readonly attributes
- Validation on construction and assignment
- Methods and custom setters
- Extension with extend_as
- Introspection on the model class
"""

import pytest

from catwalk import Model, define
from catwalk.errors import (
    DataTypeError,
    DefinitionError,
    MissingValueError,
    UnknownAttributeError,
    ValidationError,
)


@pytest.fixture
def car_model():
    """Car model for testing."""
    return define("Car", {"brand": str, "wheels": {"type": int, "default": 4}})


@pytest.fixture
def person_model():
    """Person model for testing."""
    return define(
        "Person",
        {
            "id": {"type": int, "readonly": True},
            "first_name": str,
            "last_name": str,
            "age": int,
            "male": bool,
        },
    )


class TestConstruction:
    """Tests for creating instances."""

    def test_defaults_fill_missing_values(self, car_model):
        """Supplied values and defaults combine."""
        civic = car_model({"brand": "Civic"})
        assert civic.brand == "Civic"
        assert civic.wheels == 4
        assert civic.to_plain_data() == {"brand": "Civic", "wheels": 4}

    def test_keyword_values(self, car_model):
        """Keywords work like a data mapping and take precedence."""
        car = car_model({"brand": "Civic"}, brand="Accord", wheels=6)
        assert car.brand == "Accord"
        assert car.wheels == 6

    def test_create_equals_constructor(self, car_model):
        """create() is the same as calling the class."""
        data = {"brand": "Roadster MonsterTruck", "wheels": 8}
        assert car_model.create(data) == car_model(data)
        assert car_model.create(data).to_json() == car_model(data).to_json()

    def test_model_define_equals_define(self):
        """Model.define and define build equivalent models."""
        Toy1 = Model.define("Toy", {"brand": str})
        Toy2 = define("Toy", {"brand": str})
        assert Toy1({"brand": "ToyBrand"}).to_json() == Toy2({"brand": "ToyBrand"}).to_json()

    def test_instances_are_models(self, car_model):
        """Defined classes are Model subclasses."""
        assert issubclass(car_model, Model)
        assert isinstance(car_model(), car_model)
        assert car_model.__name__ == "Car"

    def test_unknown_keys_are_ignored(self, car_model):
        """Non-strict models ignore unknown keys."""
        car = car_model({"brand": "Jeep", "type": "Roadster"})
        assert car.to_plain_data() == {"brand": "Jeep", "wheels": 4}

    def test_data_must_be_mapping(self, car_model):
        """Non-mapping data raises a TypeError."""
        with pytest.raises(DataTypeError, match="expects a mapping"):
            car_model("Civic")
        with pytest.raises(TypeError):
            car_model(["brand", "Civic"])

    def test_model_base_cannot_be_instantiated(self):
        """Model itself has no schema."""
        with pytest.raises(DataTypeError):
            Model()

    def test_zero_values(self):
        """Attributes without value or default get their zero value."""
        Flags = define("Flags", {"active": bool, "count": int, "label": str, "extra": dict})
        flags = Flags()
        assert flags.to_plain_data() == {"active": False, "count": 0, "label": "", "extra": None}

    def test_zero_value_bypasses_checks(self):
        """Zero values are not checked."""
        TaxPayer = define("TaxPayer", {"age": {"type": int, "min": 18}})
        assert TaxPayer().age == 0

    def test_default_producer_called_once_per_instance(self):
        """Callable defaults produce a fresh value per instance."""
        calls = []

        def make_tags():
            calls.append(1)
            return []

        Post = define("Post", {"tags": {"type": list, "default": make_tags}})
        first, second = Post(), Post()
        assert len(calls) == 2
        assert first.tags == []
        assert first.tags is not second.tags

    def test_default_producer_not_called_when_supplied(self):
        """Producers only run for missing values."""
        calls = []
        Post = define("Post", {"tags": {"type": list, "default": lambda: calls.append(1) or []}})
        Post({"tags": ["a"]})
        assert calls == []

    def test_class_default_is_a_producer(self):
        """Classes used as defaults are called."""
        Post = define("Post", {"meta": {"type": dict, "default": dict}})
        assert Post().meta == {}
        assert Post().meta is not Post().meta

    def test_invalid_default_raises(self):
        """Defaults are checked like supplied values."""
        Broken = define("Broken", {"age": {"type": int, "min": 18, "default": 3}})
        with pytest.raises(ValidationError):
            Broken()

    def test_none_default(self):
        """None is a valid default for nullable attributes."""
        Node = define("Node", {"payload": {"type": dict, "nullable": True, "default": None}})
        assert Node().payload is None


class TestReadonly:
    """Tests for readonly attributes."""

    def test_missing_readonly_raises(self, person_model):
        """Readonly attributes without value or default raise."""
        with pytest.raises(MissingValueError, match="'id'") as exc_info:
            person_model({"first_name": "John"})
        assert exc_info.value.field_name == "id"
        assert isinstance(exc_info.value, ValidationError)

    def test_readonly_with_default(self):
        """Defaults satisfy readonly attributes."""
        Token = define("Token", {"kind": {"type": str, "readonly": True, "default": "bearer"}})
        assert Token().kind == "bearer"

    def test_readonly_assignment_is_ignored(self, person_model):
        """Assignments to readonly attributes do nothing."""
        person = person_model({"id": 1})
        person.id = 99
        assert person.id == 1

    def test_readonly_type_still_checked(self, person_model):
        """Readonly values must have the right type."""
        with pytest.raises(ValidationError, match="must be of type int"):
            person_model({"id": "one"})


class TestValidation:
    """Tests for checks on construction and assignment."""

    def test_min_max(self):
        """Numbers outside min/max are rejected."""
        TaxPayer = define("TaxPayer", {"age": {"type": int, "min": 18, "max": 85}})

        with pytest.raises(ValidationError):
            TaxPayer({"age": 14})

        adult = TaxPayer({"age": 20})
        with pytest.raises(ValidationError):
            adult.age = 5
        with pytest.raises(ValidationError):
            adult.age = 120
        adult.age = 85
        adult.age = 18
        assert adult.age == 18

    def test_zero_bound_is_ignored(self):
        """A min of zero does not restrict the value."""
        Account = define("Account", {"balance": {"type": int, "min": 0}})
        account = Account({"balance": -5})
        assert account.balance == -5
        account.balance = -10
        assert account.balance == -10

    def test_failed_assignment_keeps_value(self):
        """A rejected assignment leaves the previous value."""
        Person = define("Person", {"age": {"type": int, "min": 18, "max": 85}})
        person = Person({"age": 20})
        with pytest.raises(ValidationError) as exc_info:
            person.age = 90
        assert person.age == 20
        assert exc_info.value.field_name == "age"
        assert exc_info.value.value == 90
        assert exc_info.value.check == "max"

    def test_construction_error_names_value(self):
        """Construction errors name the attribute and value."""
        Person = define("Person", {"age": {"type": int, "min": 18, "max": 85}})
        with pytest.raises(ValidationError, match="'age'.*10") as exc_info:
            Person({"age": 10})
        assert exc_info.value.model_name == "Person"

    def test_min_max_length(self):
        """Strings outside min_length/max_length are rejected."""
        Person = define("Person", {"name": {"type": str, "min_length": 3, "max_length": 12}})

        with pytest.raises(ValidationError):
            Person({"name": "-"})
        human = Person({"name": "John Doe"})

        with pytest.raises(ValidationError):
            human.name = "-"
        with pytest.raises(ValidationError):
            human.name = "Name with 23 characters"
        human.name = "Valid name"
        human.name = "abc"
        human.name = "x" * 12
        with pytest.raises(ValidationError):
            human.name = "ab"
        with pytest.raises(ValidationError):
            human.name = "x" * 13

    def test_match(self):
        """Strings are matched against the declared pattern."""
        Book = define("Book", {"isbn": {"type": str, "match": "/^(97[89])?\\d{9}-?\\d$/"}})

        with pytest.raises(ValidationError):
            Book({"isbn": "invalid"})
        gatsby = Book({"isbn": "9781597226769"})

        with pytest.raises(ValidationError):
            gatsby.isbn = "978X597226769"
        gatsby.isbn = "142707031-9"
        assert gatsby.isbn == "142707031-9"

    def test_format(self):
        """Strings are matched against named formats."""
        User = define("User", {"email": {"type": str, "format": "email"}})
        assert User({"email": "user@mail.com"}).email == "user@mail.com"
        for invalid in ("user@mail", "@mail.com", "gibberish"):
            with pytest.raises(ValidationError):
                User({"email": invalid})

    def test_no_coercion(self):
        """Primitive values are never coerced."""
        Counter = define("Counter", {"count": int, "enabled": bool})
        with pytest.raises(ValidationError):
            Counter({"count": "5"})
        with pytest.raises(ValidationError):
            Counter({"enabled": 1})
        counter = Counter()
        with pytest.raises(ValidationError):
            counter.count = True

    def test_nested_model_type(self):
        """Nested model attributes accept instances of that model."""
        Engine = define("Engine", {"power": int})
        Car = define("Car", {"engine": {"type": Engine, "nullable": True}})
        car = Car({"engine": Engine({"power": 120})})
        assert car.engine.power == 120
        car.engine = None
        with pytest.raises(ValidationError):
            car.engine = {"power": 90}

    def test_undeclared_attribute_assignment(self, car_model):
        """Instances have no room for undeclared attributes."""
        car = car_model()
        with pytest.raises(AttributeError):
            car.color = "red"

    def test_strict_rejects_unknown_keys(self):
        """Strict models reject unknown keys with suggestions."""
        Car = define("Car", {"brand": str, "wheels": int}, config={"strict": True})
        with pytest.raises(UnknownAttributeError, match="Did you mean: wheels") as exc_info:
            Car({"wheel": 4})
        assert exc_info.value.suggestions == ["wheels"]
        assert exc_info.value.field_name == "wheel"


class TestMethods:
    """Tests for methods and custom setters."""

    def test_methods_are_copied(self):
        """Methods are the exact callables declared."""

        def birthday(self):
            self.age = self.age + 1

        Human = define("Human", {"age": int, "birthday": birthday})
        assert Human.birthday is birthday
        assert "birthday" in vars(Human)

        daughter = Human({"age": 7})
        assert daughter.age == 7
        daughter.birthday()
        assert daughter.age == 8

    def test_methods_go_through_validation(self):
        """Assignments inside methods are checked."""
        Human = define(
            "Human",
            {
                "age": {"type": int, "max": 8},
                "birthday": lambda self: setattr(self, "age", self.age + 1),
            },
        )
        child = Human({"age": 8})
        with pytest.raises(ValidationError):
            child.birthday()
        assert child.age == 8

    def test_custom_setter(self):
        """Custom setters replace checks and their result is stored."""
        Person = define(
            "Person",
            {"name": {"type": str, "min_length": 3, "set": lambda self, value: value.strip().title()}},
        )
        person = Person({"name": "Jane"})
        person.name = "  john doe "
        assert person.name == "John Doe"
        person.name = "al"
        assert person.name == "Al"

    def test_custom_setter_sees_instance(self):
        """Custom setters can update other attributes."""

        def set_full_name(self, value):
            self.first_name, self.last_name = value.split(" ", 1)
            return value

        Person = define(
            "Person",
            {"first_name": str, "last_name": str, "full_name": {"type": str, "set": set_full_name}},
        )
        person = Person()
        person.full_name = "Ada Lovelace"
        assert person.first_name == "Ada"
        assert person.last_name == "Lovelace"


class TestExtension:
    """Tests for extend_as."""

    def test_extend_as(self, car_model):
        """Children inherit attributes, defaults and checks."""
        SportsCar = car_model.extend_as("SportsCar", {"top_speed": {"type": int, "min": 100}})
        assert issubclass(SportsCar, car_model)
        assert SportsCar.attribute_names == ("brand", "wheels", "top_speed")

        car = SportsCar({"brand": "Ferrari", "top_speed": 320})
        assert isinstance(car, car_model)
        assert car.to_plain_data() == {"brand": "Ferrari", "wheels": 4, "top_speed": 320}
        with pytest.raises(ValidationError):
            car.top_speed = 50

    def test_inherited_attribute_errors_name_child(self):
        """Errors on inherited attributes name the instance's model."""
        Car = define("Car", {"wheels": {"type": int, "min": 2}})
        SportsCar = Car.extend_as("SportsCar", {"top_speed": int})
        car = SportsCar({"wheels": 4})
        with pytest.raises(ValidationError, match="^SportsCar: ") as exc_info:
            car.wheels = 1
        assert exc_info.value.model_name == "SportsCar"

    def test_inheritance_law(self, car_model):
        """Child names are parent names plus own names."""
        Truck = car_model.extend_as("Truck", {"load": float, "axles": int})
        assert Truck.attribute_names == car_model.attribute_names + ("load", "axles")
        for name in car_model.attribute_names:
            assert Truck.has_attribute(name)

    def test_define_on_model_extends(self, car_model):
        """define on a defined model extends it."""
        Van = car_model.define("Van", {"seats": int})
        assert Van.__schema__.parent is car_model.__schema__

    def test_parent_methods_are_inherited(self):
        """Methods of the parent work on children."""
        Animal = define("Animal", {"name": str, "greet": lambda self: f"I am {self.name}"})
        Dog = Animal.extend_as("Dog", {"breed": str})
        assert Dog({"name": "Lassie"}).greet() == "I am Lassie"

    def test_redeclared_attribute(self, car_model):
        """Children can redeclare a parent attribute."""
        Bike = car_model.extend_as("Bike", {"wheels": {"type": int, "default": 2, "max": 3}})
        bike = Bike({"brand": "BMX"})
        assert bike.to_plain_data() == {"brand": "BMX", "wheels": 2}
        with pytest.raises(ValidationError):
            bike.wheels = 4
        assert car_model().wheels == 4

    def test_extend_model_base_raises(self):
        """Model itself cannot be extended."""
        with pytest.raises(DefinitionError):
            Model.extend_as("Thing", {"name": str})

    def test_invalid_parent_raises(self):
        """Parents must be defined models."""
        with pytest.raises(DefinitionError, match="must be a defined model"):
            define("Thing", {"name": str}, parent=dict)


class TestIntrospection:
    """Tests for class-level introspection."""

    def test_attribute_names(self, person_model):
        """attribute_names lists attributes in declaration order."""
        assert person_model.attribute_names == ("id", "first_name", "last_name", "age", "male")

    def test_has_attribute(self, person_model):
        """has_attribute knows attributes only."""
        for name in ("id", "first_name", "last_name", "age", "male"):
            assert person_model.has_attribute(name)
        assert not person_model.has_attribute("Age")
        assert not person_model.has_attribute("email")
        assert not person_model.has_attribute("__str__")
        assert not person_model.has_attribute("to_plain_data")

    def test_is_readonly(self, person_model):
        """is_readonly reports readonly attributes."""
        assert person_model.is_readonly("id")
        assert not person_model.is_readonly("age")
        assert not person_model.is_readonly("notexisting")

    def test_is_valid_for(self, person_model):
        """is_valid_for checks a value without an instance."""
        assert person_model.is_valid_for("id", 55)
        assert not person_model.is_valid_for("invalid_prop", 1)
        assert person_model.is_valid_for("first_name", "John")
        assert not person_model.is_valid_for("first_name", True)
        assert person_model.is_valid_for("last_name", "Doe")
        assert not person_model.is_valid_for("last_name", None)
        assert person_model.is_valid_for("male", True)
        assert person_model.is_valid_for("male", False)
        assert not person_model.is_valid_for("male", "female")
        assert not person_model.is_valid_for("", 0)

    def test_base_model_introspection(self):
        """Model itself has no attributes."""
        assert Model.attribute_names == ()
        assert not Model.has_attribute("id")
        assert not Model.is_readonly("id")
        assert not Model.is_valid_for("id", 1)

    def test_repr_and_equality(self, car_model):
        """Instances compare and print by value."""
        assert repr(car_model({"brand": "Civic"})) == "Car(brand='Civic', wheels=4)"
        assert car_model({"brand": "Civic"}) == car_model(brand="Civic")
        assert car_model({"brand": "Civic"}) != car_model(brand="Accord")
